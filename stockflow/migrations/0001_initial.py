"""
Initial migration for Stockflow models.
"""

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create Stockflow models: StockPosition, StockMovementRequest, StockMovement."""

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='StockPosition',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('product_id', models.CharField(max_length=64, verbose_name='Product')),
                ('warehouse_id', models.CharField(max_length=64, verbose_name='Warehouse')),
                ('location_id', models.CharField(blank=True, max_length=64, null=True, verbose_name='Location')),
                ('quantity_on_hand', models.IntegerField(default=0, verbose_name='On hand')),
                ('quantity_available', models.IntegerField(default=0, verbose_name='Available')),
                ('quantity_reserved', models.IntegerField(default=0, verbose_name='Reserved')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Stock position',
                'verbose_name_plural': 'Stock positions',
                'ordering': ['product_id', 'warehouse_id'],
            },
        ),
        migrations.CreateModel(
            name='StockMovementRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('request_type', models.CharField(choices=[('movement', 'Movement'), ('transfer', 'Transfer'), ('adjustment', 'Adjustment')], max_length=20, verbose_name='Request type')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], db_index=True, default='pending', max_length=20, verbose_name='Status')),
                ('payload', models.JSONField(default=dict, verbose_name='Payload')),
                ('requested_by', models.CharField(max_length=150, verbose_name='Requested by')),
                ('requested_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Requested at')),
                ('decided_by', models.CharField(blank=True, default='', help_text='Approver or rejecter', max_length=150, verbose_name='Decided by')),
                ('decided_at', models.DateTimeField(blank=True, null=True, verbose_name='Decided at')),
                ('notes', models.TextField(blank=True, default='', verbose_name='Notes')),
                ('rejection_reason', models.TextField(blank=True, default='', verbose_name='Rejection reason')),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Stock movement request',
                'verbose_name_plural': 'Stock movement requests',
                'ordering': ['-requested_at'],
            },
        ),
        migrations.CreateModel(
            name='StockMovement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('product_id', models.CharField(max_length=64, verbose_name='Product')),
                ('warehouse_id', models.CharField(max_length=64, verbose_name='Warehouse')),
                ('location_id', models.CharField(blank=True, max_length=64, null=True, verbose_name='Location')),
                ('type', models.CharField(choices=[('in', 'Stock in'), ('out', 'Stock out'), ('transfer', 'Transfer'), ('adjustment', 'Adjustment')], max_length=20, verbose_name='Type')),
                ('quantity', models.IntegerField(help_text='Positive = increase, negative = decrease', verbose_name='Quantity')),
                ('unit_cost', models.DecimalField(blank=True, decimal_places=4, max_digits=12, null=True, verbose_name='Unit cost')),
                ('reason', models.CharField(blank=True, default='', max_length=255, verbose_name='Reason')),
                ('reference', models.CharField(blank=True, db_index=True, default='', help_text='Groups entries of one operation, e.g. TR-1718000000000', max_length=100, verbose_name='Reference')),
                ('created_by', models.CharField(blank=True, default='', max_length=150, verbose_name='Created by')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Created at')),
                ('position', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='stockflow.stockposition', verbose_name='Position')),
                ('request', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='stockflow.stockmovementrequest', verbose_name='Request')),
            ],
            options={
                'verbose_name': 'Stock movement',
                'verbose_name_plural': 'Stock movements',
                'ordering': ['created_at', 'id'],
            },
        ),
        migrations.AddConstraint(
            model_name='stockposition',
            constraint=models.UniqueConstraint(fields=('product_id', 'warehouse_id'), name='unique_position_product_warehouse'),
        ),
        migrations.AddIndex(
            model_name='stockposition',
            index=models.Index(fields=['warehouse_id'], name='stockflow_pos_warehouse_idx'),
        ),
        migrations.AddIndex(
            model_name='stockmovementrequest',
            index=models.Index(fields=['status', 'request_type'], name='stockflow_req_status_idx'),
        ),
        migrations.AddIndex(
            model_name='stockmovement',
            index=models.Index(fields=['product_id', 'warehouse_id'], name='stockflow_mov_key_idx'),
        ),
    ]
