"""Gunicorn 生产配置

用法:
  gunicorn --config deploy/gunicorn.conf.py gitdeps.web.app:app
"""

import os

# ---------- 网络 ----------
bind = os.getenv("GUNICORN_BIND", "127.0.0.1:8888")

# ---------- 并发 ----------
# 包操作锁只在进程内有效，多个 worker 会并发改写同一个包目录
workers = 1
threads = int(os.getenv("GUNICORN_THREADS", "4"))
worker_class = "gthread"
# clone 大仓库可能很慢
timeout = int(os.getenv("GUNICORN_TIMEOUT", "600"))

# ---------- 日志 ----------
accesslog = os.getenv("GUNICORN_ACCESS_LOG", "-")
errorlog = os.getenv("GUNICORN_ERROR_LOG", "-")
loglevel = os.getenv("GUNICORN_LOG_LEVEL", "info")

# ---------- 进程管理 ----------
graceful_timeout = 60
keepalive = 5
