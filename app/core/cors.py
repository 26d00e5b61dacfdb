# app/core/cors.py

# Encabezados permisivos que acompañan cada respuesta de las funciones
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}
