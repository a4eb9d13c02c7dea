# Generated manually
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('core', '0001_initial'),
        ('parties', '0001_initial'),
        ('orders', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action_type', models.CharField(choices=[('order_created', 'Order Created'), ('order_updated', 'Order Updated'), ('order_deleted', 'Order Deleted'), ('order_status_changed', 'Order Status Changed'), ('payment_received', 'Payment Received'), ('payment_updated', 'Payment Updated'), ('payment_deleted', 'Payment Deleted'), ('customer_created', 'Customer Created'), ('customer_updated', 'Customer Updated'), ('product_created', 'Product Created'), ('product_updated', 'Product Updated')], max_length=50)),
                ('entity_type', models.CharField(help_text='e.g. order, payment, customer, product', max_length=50)),
                ('entity_id', models.CharField(max_length=100)),
                ('description', models.TextField()),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('performed_by', models.CharField(blank=True, help_text='Username of the acting user', max_length=150, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('order', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_logs', to='orders.order')),
                ('customer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_logs', to='parties.customer')),
            ],
            options={
                'db_table': 'audit_logs',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['-created_at'], name='idx_audit_logs_created_at'),
                    models.Index(fields=['action_type'], name='idx_audit_logs_action_type'),
                    models.Index(fields=['entity_type'], name='idx_audit_logs_entity_type'),
                ],
            },
        ),
    ]
