"""Dominio: plataformas, peticiones/resultados de avatar y taxonomía de errores.

Sin HTTP ni CLI aquí; solo los conceptos que comparten el resolver y los adaptadores.
"""
