#  common/translations/messages.py
from typing import Dict, Optional, Literal

MESSAGES = {
    # === Server / auth ===
    "server.error": {
        "en": "Internal Server Error",
        "es": "Error interno del servidor"
    },
    "auth.missing_token": {
        "en": "Authorization header missing or invalid",
        "es": "Falta el encabezado de autorización o no es válido"
    },
    "auth.invalid_token": {
        "en": "Authentication failed",
        "es": "La autenticación ha fallado"
    },
    "auth.forbidden": {
        "en": "Admin access required",
        "es": "Se requiere acceso de administrador"
    },

    # === Reports ===
    "report.invalid_reason": {
        "en": "Invalid report reason",
        "es": "Motivo de denuncia no válido"
    },
    "report.invalid_image_id": {
        "en": "Invalid image ID",
        "es": "ID de imagen no válido"
    },
    "report.invalid_user_id": {
        "en": "Invalid user ID",
        "es": "ID de usuario no válido"
    },
    "report.invalid_id": {
        "en": "Invalid report ID",
        "es": "ID de denuncia no válido"
    },
    "report.image_not_found": {
        "en": "Image not found",
        "es": "Imagen no encontrada"
    },
    "report.user_not_found": {
        "en": "User not found",
        "es": "Usuario no encontrado"
    },
    "report.self_content": {
        "en": "You cannot report your own content",
        "es": "No puedes denunciar tu propio contenido"
    },
    "report.self_user": {
        "en": "You cannot report yourself",
        "es": "No puedes denunciarte a ti mismo"
    },
    "report.duplicate_content": {
        "en": "You have already reported this content recently",
        "es": "Ya has denunciado este contenido recientemente"
    },
    "report.duplicate_user": {
        "en": "You have already reported this user recently",
        "es": "Ya has denunciado a este usuario recientemente"
    },
    "report.submitted": {
        "en": "Report submitted successfully. Our team will review it within {hours} hours.",
        "es": "Denuncia enviada correctamente. Nuestro equipo la revisará en un plazo de {hours} horas."
    },
    "report.description_too_long": {
        "en": "Description cannot exceed {max} characters",
        "es": "La descripción no puede superar los {max} caracteres"
    },
    "report.invalid_transition": {
        "en": "Cannot change report status from {current} to {status}",
        "es": "No se puede cambiar el estado de la denuncia de {current} a {status}"
    },
    "report.not_found": {
        "en": "Report not found",
        "es": "Denuncia no encontrada"
    },
    "report.invalid_status": {
        "en": "Invalid status",
        "es": "Estado no válido"
    },
    "report.status_updated": {
        "en": "Report status updated to {status}",
        "es": "Estado de la denuncia actualizado a {status}"
    },
    "report.already_closed": {
        "en": "Report is already {status} and cannot be changed",
        "es": "La denuncia ya está {status} y no se puede modificar"
    },
    "report.already_handled": {
        "en": "Report was already closed with action {action}",
        "es": "La denuncia ya se cerró con la acción {action}"
    },

    # === Moderation actions ===
    "moderation.no_target_user": {
        "en": "No target user to {verb}",
        "es": "No hay usuario objetivo para {verb}"
    },
    "moderation.target_user_not_found": {
        "en": "Target user not found",
        "es": "Usuario objetivo no encontrado"
    },
    "moderation.ban_reason_required": {
        "en": "Ban reason is required",
        "es": "El motivo de la expulsión es obligatorio"
    },
    "moderation.invalid_duration": {
        "en": "Suspension length must be between {min} and {max} days",
        "es": "La suspensión debe durar entre {min} y {max} días"
    },
    "moderation.notes_too_long": {
        "en": "Notes cannot exceed {max} characters",
        "es": "Las notas no pueden superar los {max} caracteres"
    },
    "moderation.no_image": {
        "en": "No image to remove for this report",
        "es": "No hay imagen que eliminar para esta denuncia"
    },
    "moderation.warned": {
        "en": "Warning issued successfully",
        "es": "Advertencia emitida correctamente"
    },
    "moderation.suspended": {
        "en": "User suspended for {days} days",
        "es": "Usuario suspendido durante {days} días"
    },
    "moderation.banned": {
        "en": "User has been permanently banned",
        "es": "El usuario ha sido expulsado permanentemente"
    },
    "moderation.content_removed": {
        "en": "Content removed successfully",
        "es": "Contenido eliminado correctamente"
    },
    "moderation.content_already_removed": {
        "en": "Content was already removed",
        "es": "El contenido ya había sido eliminado"
    },
    "moderation.dismissed": {
        "en": "Report dismissed",
        "es": "Denuncia desestimada"
    },
    "moderation.sla_checked": {
        "en": "SLA check complete",
        "es": "Comprobación de SLA completada"
    },

    # === Blocks ===
    "block.invalid_user_id": {
        "en": "Invalid user ID",
        "es": "ID de usuario no válido"
    },
    "block.self": {
        "en": "You cannot block yourself",
        "es": "No puedes bloquearte a ti mismo"
    },
    "block.user_not_found": {
        "en": "User not found",
        "es": "Usuario no encontrado"
    },
    "block.already": {
        "en": "You have already blocked this user",
        "es": "Ya has bloqueado a este usuario"
    },
    "block.created": {
        "en": "{name} has been blocked. Their content will no longer appear in your feed.",
        "es": "{name} ha sido bloqueado. Su contenido ya no aparecerá en tu feed."
    },
    "block.not_found": {
        "en": "Block not found. This user is not blocked.",
        "es": "Bloqueo no encontrado. Este usuario no está bloqueado."
    },
    "block.removed": {
        "en": "User has been unblocked",
        "es": "El usuario ha sido desbloqueado"
    },

    # === Images ===
    "image.invalid_category": {
        "en": "Please provide a valid category",
        "es": "Indica una categoría válida"
    },

    # === Notification templates ===
    "notification.report_resolved.title": {
        "en": "Report Resolved",
        "es": "Denuncia resuelta"
    },
    "notification.report_resolved.body": {
        "en": "Thank you for your report. We have reviewed it and taken appropriate action.",
        "es": "Gracias por tu denuncia. La hemos revisado y hemos tomado las medidas oportunas."
    },
    "notification.report_content_removed.title": {
        "en": "Report Resolved",
        "es": "Denuncia resuelta"
    },
    "notification.report_content_removed.body": {
        "en": "Thank you for your report. The content has been removed.",
        "es": "Gracias por tu denuncia. El contenido ha sido eliminado."
    },
    "notification.report_dismissed.title": {
        "en": "Report Reviewed",
        "es": "Denuncia revisada"
    },
    "notification.report_dismissed.body": {
        "en": "We have reviewed your report. After investigation, we determined that no violation occurred. Thank you for helping keep our community safe.",
        "es": "Hemos revisado tu denuncia. Tras investigarla, hemos determinado que no hubo ninguna infracción. Gracias por ayudar a mantener segura nuestra comunidad."
    },
    "notification.moderation_warning.title": {
        "en": "Account Warning",
        "es": "Advertencia en tu cuenta"
    },
    "notification.moderation_warning.body": {
        "en": "You have received a warning for violating our community guidelines. Continued violations may result in account suspension.",
        "es": "Has recibido una advertencia por infringir nuestras normas de la comunidad. Las infracciones reiteradas pueden suponer la suspensión de la cuenta."
    },
    "notification.moderation_suspension.title": {
        "en": "Account Suspended",
        "es": "Cuenta suspendida"
    },
    "notification.moderation_suspension.body": {
        "en": "Your account has been suspended for {days} days due to community guideline violations. You will be able to access your account again after {until}.",
        "es": "Tu cuenta ha sido suspendida durante {days} días por infringir las normas de la comunidad. Podrás volver a acceder a tu cuenta después del {until}."
    },
    "notification.moderation_ban.title": {
        "en": "Account Terminated",
        "es": "Cuenta cancelada"
    },
    "notification.moderation_ban.body": {
        "en": "Your account has been permanently banned. Reason: {reason}",
        "es": "Tu cuenta ha sido expulsada permanentemente. Motivo: {reason}"
    },
    "notification.content_removed.title": {
        "en": "Content Removed",
        "es": "Contenido eliminado"
    },
    "notification.content_removed.body": {
        "en": "Your artwork \"{art_name}\" has been removed for violating our community guidelines.",
        "es": "Tu obra \"{art_name}\" ha sido eliminada por infringir nuestras normas de la comunidad."
    },

    # === Email subjects, keyed by notification type ===
    "email.subject.report_resolved": {
        "en": "Your report has been reviewed",
        "es": "Tu denuncia ha sido revisada"
    },
    "email.subject.moderation_warning": {
        "en": "Important: Account warning",
        "es": "Importante: advertencia en tu cuenta"
    },
    "email.subject.moderation_suspension": {
        "en": "Account suspended",
        "es": "Cuenta suspendida"
    },
    "email.subject.moderation_ban": {
        "en": "Account terminated",
        "es": "Cuenta cancelada"
    },
    "email.subject.content_removed": {
        "en": "Content removed",
        "es": "Contenido eliminado"
    },
}

def get_message(key: str, lang: Literal["en", "es"] = "en", variables: Optional[Dict[str, int | str]] = None) -> str:
    """
    Retrieve a localized message based on key and language, with optional variable substitution.

    Args:
        key (str): Message key (e.g., 'report.not_found')
        lang (Literal["en", "es"]): Language code ('en' or 'es')
        variables (Optional[Dict[str, int | str]]): Variables to substitute in the message

    Returns:
        str: Localized message or key as fallback
    """
    message = MESSAGES.get(key, {}).get(lang) or MESSAGES.get(key, {}).get("en") or key
    if variables:
        try:
            return message.format(**variables)
        except (KeyError, ValueError):
            return message
    return message
