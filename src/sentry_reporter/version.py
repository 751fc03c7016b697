CLIENT_NAME = "sentry-reporter"
VERSION = "0.1.0"
