"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) que implementan adaptadores concretos.
- Permite invertir dependencias: el Core depende de abstracciones, no de httpx,
  Playwright o smtplib.
"""
