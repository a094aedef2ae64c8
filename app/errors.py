# app/errors.py

from typing import Optional

from fastapi import status


class ServiceError(Exception):
    """Base class for failures rendered to clients as ``{"error": message}``."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Error interno del servidor."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Datos inválidos."


class MissingCredentials(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Faltan credenciales."


class InvalidCredentials(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Usuario o contraseña inválidos."


class MissingToken(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Falta token de autorización."


class MalformedHeader(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Formato de token inválido."


class InvalidToken(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Token inválido o expirado."


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Producto no encontrado."


class ServiceUnavailable(ServiceError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Servicio no disponible."


class InternalError(ServiceError):
    pass
