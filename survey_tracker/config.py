"""
Centralized configuration — env vars and export constants.
"""
import os


# ── Logging ──────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FORMAT = os.getenv('LOG_FORMAT', 'text')

# ── Record store ─────────────────────────────────────────────────────────────
# "file" keeps every week in one JSON array, "sql" uses DATABASE_URL.
STORE_BACKEND = os.getenv('STORE_BACKEND', 'file')
DATA_FILE = os.getenv('DATA_FILE', os.path.join('data', 'data.json'))

# ── PostgreSQL ────────────────────────────────────────────────────────────────
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///local.db')

# ── HTTP ──────────────────────────────────────────────────────────────────────
PORT = int(os.getenv('PORT', 8080))
SERVICE_NAME = 'Survey Statistics API'

# ── Export ────────────────────────────────────────────────────────────────────
EXPORT_VERSION = os.getenv('EXPORT_VERSION', '2.0.0')

CSV_HEADER = [
    'Дата',
    'ФЭС',
    'Всего ПУ',
    'ПУ в опросе',
    'ПУ не в опросе',
    '% опроса',
    'СПОДЭС ПУ',
    'СПОДЭС в опросе',
    'СПОДЭС не в опросе',
    '% СПОДЭС',
    'Примечание',
]

# Note column value for items excluded from the aggregate percentage
PS_RES_NOTE = 'не в общем %'
