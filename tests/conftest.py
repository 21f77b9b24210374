import os


os.environ.setdefault("MYSQL_HOST", "127.0.0.1")
os.environ.setdefault("MYSQL_SYSTEM_USER", "root")
os.environ.setdefault("MYSQL_SYSTEM_PASSWORD", "test-password")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
