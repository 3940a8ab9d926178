from . import base as base_settings

DEBUG = base_settings.DEBUG
INSTALLED_APPS = [*base_settings.INSTALLED_APPS]

if DEBUG:
    EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"

for setting_name in dir(base_settings):
    if setting_name.isupper() and setting_name not in globals():
        globals()[setting_name] = getattr(base_settings, setting_name)
