"""
Feather Script Store - App Configuration
========================================
Persistent tenant logic scripts (table ``logic_scripts``).
"""

from django.apps import AppConfig


class CoreScriptStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.script_store"
    label = "core_script_store"
    verbose_name = "Feather Script Store"
