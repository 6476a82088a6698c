# live_scoring/log_config/__init__.py
