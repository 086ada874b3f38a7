"""Servicios del Core: flujo de resolución/verificación y política de clasificación."""
