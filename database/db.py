"""Единое место для peewee-Proxy ``db``.

Фактическая база привязывается в :func:`database.init.init_from_env`.
"""

from peewee import Proxy

db = Proxy()
