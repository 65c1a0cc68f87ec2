"""
utils/constants.py

Purpose: Centralized static content

- All user-facing bot messages (Spanish)
- Report labels and file names

(Prevents hardcoding across the codebase)
"""

# ============================================================
# ACCESS
# ============================================================

START_MESSAGE = "👋 Bot activo.\n\nPara ver tu Chat ID usa: /id\n"

START_AUTHORIZED = "\n✅ Ya estás autorizado.\nUsa: /historial CURP NSS"

START_UNAUTHORIZED = "\n⛔ Aún no estás autorizado."

CHAT_ID_MESSAGE = "🆔 Tu Chat ID es:\n{chat_id}"

DENY_MESSAGE = (
    "⛔ Acceso denegado.\n\n"
    "✅ Solicita acceso con el administrador.\n"
    "📩 Envía tu Chat ID con: /id"
)

ADMIN_ONLY_MESSAGE = "⛔ Solo admin."

BALANCE_MESSAGE = "💳 Tus créditos: {credits}\nCosto por consulta: {cost}"

# ============================================================
# ADMIN
# ============================================================

ADMIN_HELP_MESSAGE = (
    "🛠️ Admin comandos:\n\n"
    "/grant CHAT_ID  → autoriza\n"
    "/revoke CHAT_ID → revoca\n"
    "/addcredits CHAT_ID MONTO → suma\n"
    "/setcredits CHAT_ID MONTO → fija\n"
    "/credits CHAT_ID → ver\n"
    "/users → lista autorizados\n"
)

USAGE_GRANT = "Uso: /grant CHAT_ID"
USAGE_REVOKE = "Uso: /revoke CHAT_ID"
USAGE_ADDCREDITS = "Uso: /addcredits CHAT_ID MONTO"
USAGE_SETCREDITS = "Uso: /setcredits CHAT_ID MONTO"
USAGE_CREDITS = "Uso: /credits CHAT_ID"

GRANTED_MESSAGE = "✅ Autorizado: {user_id}"
REVOKED_MESSAGE = "✅ Revocado: {user_id}"
CREDITS_ADDED_MESSAGE = "✅ Créditos actualizados para {user_id}: {credits}"
CREDITS_SET_MESSAGE = "✅ Créditos fijados para {user_id}: {credits}"
CREDITS_OF_MESSAGE = "💳 Créditos de {user_id}: {credits}"
NO_USERS_MESSAGE = "No hay usuarios autorizados."
USERS_HEADER = "✅ Autorizados:\n"
USER_LINE = "- {user_id} (créditos: {credits})"

# ============================================================
# HISTORIAL
# ============================================================

USAGE_HISTORIAL = "Uso: /historial CURP NSS\nEj: /historial RIGJ030913HOCSRLA1 50170318179"

NO_CREDITS_MESSAGE = (
    "⛔ Sin créditos.\n\n"
    "💳 Tienes: {remaining}\n"
    "Costo por consulta: {cost}\n\n"
    "Solicita recarga al admin."
)

CREDIT_USED_MESSAGE = "💳 Crédito usado. Te quedan: {remaining}"

SENDING_MESSAGE = "⏳ Enviando consulta a NUFI..."

PROVIDER_ERROR_MESSAGE = "❌ Error NUFI:\n\n```json\n{body}\n```"

MISSING_UUID_MESSAGE = "⚠️ Solicitud enviada, pero NUFI no regresó UUID.\n\n```json\n{body}\n```"

SUBMITTED_MESSAGE = "✅ Solicitud enviada.\n\nUUID:\n{request_id}\n\n📩 Esperando webhook..."

INTERNAL_ERROR_MESSAGE = "❌ Error interno. Revisa consola."

TIMED_OUT_MESSAGE = (
    "⌛ NUFI no envió el resultado de la solicitud {request_id} "
    "en {minutes} minutos. La solicitud se dio por vencida."
)

# ============================================================
# CALLBACK DELIVERY
# ============================================================

JSON_PREVIEW_LIMIT = 3500

RESULT_JSON_MESSAGE = "✅ Resultado recibido de NUFI (JSON):\n\n```json\n{preview}\n```"

FALLBACK_NOTICE_MESSAGE = "⚠️ NUFI no envió PDF en base64. Se generó uno automáticamente."

RESULT_PDF_FILENAME = "NUFI_resultado.pdf"

FALLBACK_PDF_FILENAME = "NUFI_resultado_generado.pdf"

WEBHOOK_GET_MESSAGE = "Webhook listo ✅ (usa POST, no GET)"

# ============================================================
# FALLBACK REPORT
# ============================================================

REPORT_TITLE = "NUFI - Resultado Generado"

REPORT_NO_EMPLOYMENT = "Sin empleos listados en la respuesta."

REPORT_OMITTED_EMPLOYMENT = "... (más empleos omitidos)"

REPORT_AUTOGENERATED_FOOTER = "Documento generado automáticamente (fallback)."
