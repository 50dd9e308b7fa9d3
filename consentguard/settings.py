from pathlib import Path
import os
from dotenv import load_dotenv
import dj_database_url

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / ".env")  # load once

ENV = os.getenv("DJANGO_ENV", "development").lower()  # "development" | "production" | "staging"
DEBUG_ENV = os.getenv("DEBUG", "false").lower() in ("1", "true", "yes")

# Force DEBUG off if ENV=production (even if someone sets DEBUG=true by accident)
DEBUG = False if ENV == "production" else DEBUG_ENV

DJANGO_ENV = ENV

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY")

if not SECRET_KEY and not DEBUG:
	raise ValueError("DJANGO_SECRET_KEY must be set in production")

AUTH_USER_MODEL = 'users.User'

INSTALLED_APPS = [
	'django.contrib.admin',
	'django.contrib.auth',
	'django.contrib.contenttypes',
	'django.contrib.sessions',
	'django.contrib.messages',
	'django.contrib.staticfiles',
	'corsheaders',
	'rest_framework',
	'drf_spectacular',
	'users',
	'domains',
	'consents',
	'webhooks',
	'analytics',
]

MIDDLEWARE = [
	"corsheaders.middleware.CorsMiddleware",
	"django.middleware.security.SecurityMiddleware",
	"whitenoise.middleware.WhiteNoiseMiddleware",
	"django.contrib.sessions.middleware.SessionMiddleware",
	"django.middleware.common.CommonMiddleware",
	"django.middleware.csrf.CsrfViewMiddleware",
	"django.contrib.auth.middleware.AuthenticationMiddleware",
	"django.contrib.messages.middleware.MessageMiddleware",
	"django.middleware.clickjacking.XFrameOptionsMiddleware",
]

# Allow all origins since the consent engine is embedded on external domains
CORS_ALLOW_ALL_ORIGINS = True
CORS_ALLOW_CREDENTIALS = True

CORS_ALLOW_METHODS = [
	"GET",
	"POST",
	"PUT",
	"OPTIONS",
]

CORS_ALLOW_HEADERS = [
	"content-type",
	"authorization",
]

ALLOWED_HOSTS = [
	"localhost",
	"127.0.0.1",
	"testserver",
	"api.consentguard.app",
]

REST_FRAMEWORK = {
	'DEFAULT_AUTHENTICATION_CLASSES': (
		'rest_framework_simplejwt.authentication.JWTAuthentication',
	),
	"DEFAULT_PERMISSION_CLASSES": (
		"rest_framework.permissions.IsAuthenticated",
	),
	"DEFAULT_RENDERER_CLASSES": (
		"rest_framework.renderers.JSONRenderer",
	),
	"DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
}

SPECTACULAR_SETTINGS = {
	"TITLE": "ConsentGuard API",
	"DESCRIPTION": "Consent configuration, consent intake and webhook delivery",
	"VERSION": "1.0.0",
}

ROOT_URLCONF = 'consentguard.urls'

TEMPLATES = [
	{
		'BACKEND': 'django.template.backends.django.DjangoTemplates',
		'DIRS': [],
		'APP_DIRS': True,
		'OPTIONS': {
			'context_processors': [
				'django.template.context_processors.request',
				'django.contrib.auth.context_processors.auth',
				'django.contrib.messages.context_processors.messages',
			],
		},
	},
]

# Database
if ENV == "production":
	DATABASES = {
		"default": dj_database_url.config(
			default=os.getenv("DATABASE_URL"),
			conn_max_age=600,
			ssl_require=True
		)
	}
else:
	DATABASES = {
		"default": {
			"ENGINE": "django.db.backends.sqlite3",
			"NAME": BASE_DIR / "db.sqlite3",
		}
	}

AUTH_PASSWORD_VALIDATORS = [
	{
		'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator',
	},
	{
		'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator',
	},
	{
		'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator',
	},
	{
		'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator',
	},
]

LANGUAGE_CODE = 'en-us'

TIME_ZONE = 'UTC'

USE_I18N = True

USE_TZ = True

# Static files
STATIC_URL = "/static/"

STATIC_ROOT = BASE_DIR / "staticfiles"

STORAGES = {
	"default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
	"staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

LOGGING = {
	"version": 1,
	"disable_existing_loggers": False,
	"formatters": {
		"plain": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
	},
	"handlers": {
		"console": {"class": "logging.StreamHandler", "formatter": "plain"},
	},
	"root": {"handlers": ["console"], "level": LOG_LEVEL},
}

# --- Celery ---
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/0")
CELERY_ACCEPT_CONTENT = ['json']
CELERY_TASK_SERIALIZER = 'json'
CELERY_TASK_ALWAYS_EAGER = os.getenv("CELERY_TASK_ALWAYS_EAGER", "false").lower() in ("1", "true", "yes")

# --- Webhooks ---
WEBHOOK_TIMEOUT_SECONDS = float(os.getenv("WEBHOOK_TIMEOUT_SECONDS", "10"))

# Extra hosts allowed to receive plain-http webhooks (comma separated)
WEBHOOK_LOCAL_HOSTS = [
	h.strip().lower() for h in os.getenv("WEBHOOK_LOCAL_HOSTS", "").split(",") if h.strip()
]

# Public base URL the embedded engine reports to
CONSENT_API_BASE_URL = (
		os.getenv("CONSENT_API_BASE_URL")
		or ("http://127.0.0.1:8000" if ENV == "development" else "https://api.consentguard.app")
)
