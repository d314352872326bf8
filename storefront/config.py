# storefront.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

TEMPLATES_DIR = Path(__file__).resolve().parent / "notifications" / "templates"

"""
Configuration centrale de la boutique.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, Razorpay, SMTP), CORS/hosts
- Expose les réglages du tunnel de commande (délais, préfixe de référence, clé panier)
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _float_env(name: str, default: float) -> float:
    try:
        return float(_clean_env(os.getenv(name)) or default)
    except ValueError:
        return default

# Supabase: URLs et clés (anon/service)
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or "")
SUPABASE_ANON = _clean_env(os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# CORS (dev)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h.strip()]

# Razorpay: identifiants API (le secret ne quitte jamais le serveur)
RAZORPAY_KEY_ID = _clean_env(os.getenv("RAZORPAY_KEY_ID") or "")
RAZORPAY_KEY_SECRET = _clean_env(os.getenv("RAZORPAY_KEY_SECRET") or "")
RAZORPAY_API_URL = _clean_env(os.getenv("RAZORPAY_API_URL") or "https://api.razorpay.com/v1").rstrip("/")
PAYMENT_CURRENCY = _clean_env(os.getenv("PAYMENT_CURRENCY") or "INR")

# Boutique
STORE_NAME = os.getenv("STORE_NAME", "Auric Jewelry")
ORDER_REFERENCE_PREFIX = _clean_env(os.getenv("ORDER_REFERENCE_PREFIX") or "AURIC")
CART_STORAGE_KEY = _clean_env(os.getenv("CART_STORAGE_KEY") or "auric_cart_items")
CART_STORAGE_PATH = Path(os.getenv("CART_STORAGE_PATH") or (BASE_DIR / ".storage" / "local_storage.json"))

# SMTP: service nommé (gmail, outlook...) ou hôte explicite
EMAIL_SERVICE = _clean_env(os.getenv("EMAIL_SERVICE") or "gmail")
EMAIL_HOST = _clean_env(os.getenv("EMAIL_HOST") or "")
EMAIL_PORT = int(_clean_env(os.getenv("EMAIL_PORT")) or 587)
EMAIL_SECURE = (os.getenv("EMAIL_SECURE", "false").lower() == "true")
EMAIL_USER = _clean_env(os.getenv("EMAIL_USER") or "")
EMAIL_PASS = _clean_env(os.getenv("EMAIL_PASS") or "")
EMAIL_TIMEOUT = _float_env("EMAIL_TIMEOUT", 10.0)
OWNER_EMAIL = _clean_env(os.getenv("OWNER_EMAIL") or EMAIL_USER)

# Tunnel de commande (côté client)
API_BASE_URL = _clean_env(os.getenv("API_BASE_URL") or "http://localhost:8000").rstrip("/")
CHECKOUT_INTENT_TIMEOUT = _float_env("CHECKOUT_INTENT_TIMEOUT", 15.0)
CHECKOUT_VERIFY_TIMEOUT = _float_env("CHECKOUT_VERIFY_TIMEOUT", 15.0)
CHECKOUT_CLOSE_GRACE = _float_env("CHECKOUT_CLOSE_GRACE", 2.0)
IDEMPOTENCY_WINDOW_SECONDS = int(_float_env("IDEMPOTENCY_WINDOW_SECONDS", 600))
