# config.py
import os
import logging

APP_NAME = "Pelada Sagaz"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def get_secret(name: str, default: str = "") -> str:
    # 1) tenta via variável de ambiente
    val = os.environ.get(name, "").strip()
    if val:
        return val
    # 2) tenta via secrets do Streamlit Cloud
    try:
        import streamlit as st  # só existe em runtime do app
        val = str(st.secrets.get(name, "") or "").strip()
    except Exception:
        val = ""
    return val or default


def is_demo() -> bool:
    """Modo demonstração: dados em memória, sem login."""
    return get_secret("PELADA_DEMO", "0").lower() in ("1", "true", "sim", "yes")


def setup_logging(level: str = None):
    lvl = (level or get_secret("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, lvl, logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )
