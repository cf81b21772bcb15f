# wsgi.py
import logging
import os

from scanner.main import create_app

logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Instance de l'application Flask
app = create_app()

# Optionnel : lancer le serveur manuellement en local
if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
