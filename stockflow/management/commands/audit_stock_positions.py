"""
Management command to audit positions against the ledger.

Usage:
    python manage.py audit_stock_positions
    python manage.py audit_stock_positions --warehouse W-01
    python manage.py audit_stock_positions --fail-on-divergence
"""

from django.core.management.base import BaseCommand, CommandError

from stockflow import stock


class Command(BaseCommand):
    """Audit stock positions command."""

    help = 'Lists stock positions whose on-hand quantity differs from their ledger sum'

    def add_arguments(self, parser):
        parser.add_argument(
            '--product',
            help='Only audit positions of this product id',
        )
        parser.add_argument(
            '--warehouse',
            help='Only audit positions at this warehouse id',
        )
        parser.add_argument(
            '--fail-on-divergence',
            action='store_true',
            help='Exit with an error status if any divergence is found',
        )

    def handle(self, *args, **options):
        divergent = list(stock.divergent_positions(
            product_id=options['product'],
            warehouse_id=options['warehouse'],
        ))

        if not divergent:
            self.stdout.write(self.style.SUCCESS('All positions match the ledger.'))
            return

        for position in divergent:
            self.stdout.write(
                f'{position.product_id} @ {position.warehouse_id}: '
                f'on hand {position.quantity_on_hand}, '
                f'ledger {position.ledger_quantity}, '
                f'difference {position.ledger_quantity - position.quantity_on_hand}'
            )

        summary = f'{len(divergent)} divergent position(s)'
        if options['fail_on_divergence']:
            raise CommandError(summary)
        self.stdout.write(self.style.WARNING(summary))
