from . import base as base_settings

DEBUG = False
CELERY_TASK_ALWAYS_EAGER = False

for setting_name in dir(base_settings):
    if setting_name.isupper() and setting_name not in globals():
        globals()[setting_name] = getattr(base_settings, setting_name)
