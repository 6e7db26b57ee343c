"""Interfaces/abstracciones del Core.

Define contratos (Protocol) que implementan adaptadores concretos; el Core
depende de estas abstracciones y no de `httpx`.
"""
