# run_waitress.py
# Sirve la app Flask con Waitress (producción).

from waitress import serve

from run_app import app

if __name__ == "__main__":
    host = app.config.get("HOST", "127.0.0.1")
    port = int(app.config.get("PORT", 8000))
    app.logger.info("[Waitress] Sirviendo en http://%s:%s", host, port)
    serve(app, host=host, port=port, threads=8)
