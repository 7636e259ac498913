"""
Excepciones del sistema.

Los errores por registro (campos faltantes, respuestas incompletas) no son
excepciones: se representan como None. Solo los errores de transporte y de
configuración tienen un tipo propio.
"""


class TasadorError(Exception):
    """Base de las excepciones de tasador."""


class ConfigError(TasadorError):
    """Falta configuración obligatoria. Fatal al inicio, nunca por registro."""


class TransportError(TasadorError):
    """Falló una llamada externa (página o geocodificación) a nivel red/HTTP."""

    def __init__(self, message: str, retryable: bool = True):
        super().__init__(message)
        self.retryable = retryable
