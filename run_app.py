# run_app.py
import logging

from wsbilling import create_app

# Configuración básica de logs
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)

app = create_app()
