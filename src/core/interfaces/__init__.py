"""Interfaces/abstracciones del Core.

Por qué:
- Define el contrato (`Strategy`, `AvatarSource`) que implementan las fuentes por plataforma.
- El resolver depende de estas abstracciones, no de los scrapers concretos.
"""
