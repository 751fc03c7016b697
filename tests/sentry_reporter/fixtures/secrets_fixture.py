SECRET_API_KEY = "hunter2"  # secret-line


def load_secrets(token):
    raise PermissionError("no access")  # secret-raise
