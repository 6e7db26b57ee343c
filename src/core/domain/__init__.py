"""Modelos y entidades del dominio.

Aquí viven las estructuras de datos puras y estrictas (Pydantic v2) y el
contexto compartido entre fases. El dominio no conoce HTTP, CLI ni ficheros.
"""
