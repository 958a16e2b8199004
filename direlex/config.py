import os

# --- Input / output locations ---
DATA_PATH = "data/data.json.gz"
OUTPUT_DIR = "build"
PUBLIC_DIR = "public"
TERMS_FILENAME = "js/terms.json"

# --- Site text ---
SITE_TITLE = "Diccionari de recursos lexicals"
NOT_FOUND_TITLE = "No s'ha trobat"
LETTER_TITLE = "Paraules que comencen per {letter}"

# --- Static pages, in menu order ---
GLOSSARY_PATH = "glossari"
STATIC_PAGES = (
    ("sobre-el-direlex", "Sobre el DIRELEX"),
    ("instruccions", "Instruccions d'ús"),
    ("abreviatures", "Abreviatures"),
    (GLOSSARY_PATH, "Glossari"),
    ("credits", "Crèdits"),
)

# --- Generator ---
COMPRESSIBLE_EXTENSIONS = (".css", ".js", ".svg", ".html", ".json")
GZIP_LEVEL = 9
BROTLI_QUALITY = 11
DEFAULT_WORKERS = os.cpu_count() or 1


def get_server_address():
    """Returns (host, port), the port taken from the PORT env variable."""
    port = os.environ.get("PORT") or "80"
    return "0.0.0.0", int(port)
