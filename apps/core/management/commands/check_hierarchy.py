# apps/core/management/commands/check_hierarchy.py

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from apps.core.models import Board, Column


class Command(BaseCommand):
    help = 'Audits column_count and column ordinals of every board (--fix repairs them)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--fix',
            action='store_true',
            help='Renumber columns 1..n and reset column_count where they drift',
        )
        parser.add_argument(
            '--board',
            dest='board_id',
            help='Only audit this board id',
        )

    def handle(self, *args, **options):
        fix = options['fix']
        boards = Board.objects.order_by('created_at')
        if options['board_id']:
            boards = boards.filter(pk=options['board_id'])

        self.stdout.write('🔍 Auditing board hierarchy...')

        checked = 0
        broken = []
        for board in list(boards):
            checked += 1
            problems = self._audit(board)
            if not problems:
                continue

            for problem in problems:
                self.stdout.write(self.style.WARNING(f'  ⚠️  {board.id} "{board.title}": {problem}'))

            if fix:
                self._repair(board)
                self.stdout.write(self.style.SUCCESS(f'  🔧 {board.id} repaired'))
            else:
                broken.append(board.id)

        if broken:
            raise CommandError(
                f'{len(broken)} of {checked} boards violate the hierarchy rules '
                f'(run with --fix to repair)'
            )

        self.stdout.write(self.style.SUCCESS(f'✅ {checked} boards checked, hierarchy consistent'))

    def _audit(self, board):
        """List of human readable violations for one board"""
        problems = []
        ordinals = list(
            Column.objects.filter(board=board).order_by('ordinal').values_list('ordinal', flat=True)
        )

        if board.column_count != len(ordinals):
            problems.append(f'column_count is {board.column_count}, board has {len(ordinals)} columns')

        expected = list(range(1, len(ordinals) + 1))
        if ordinals != expected:
            problems.append(f'ordinals {ordinals} are not dense (expected {expected})')

        return problems

    @transaction.atomic
    def _repair(self, board):
        # Lock the board row so a concurrent create_column waits for the repair
        board = Board.objects.select_for_update().get(pk=board.pk)
        columns = list(Column.objects.filter(board=board).order_by('ordinal', 'name'))

        for position, column in enumerate(columns, start=1):
            if column.ordinal != position:
                Column.objects.filter(pk=column.pk).update(ordinal=position)

        Board.objects.filter(pk=board.pk).update(column_count=len(columns))
