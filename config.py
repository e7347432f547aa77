import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))
DATA_DIR = os.path.join(BASE_DIR, "data")

class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev_secret")
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(DATA_DIR, "kala.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # sale dates are stored and shown in this zone
    TIMEZONE = os.getenv("TIMEZONE", "Asia/Kolkata")

    # excel imports
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.join(DATA_DIR, "uploads"))
    MAX_CONTENT_LENGTH = 5 * 1024 * 1024  # 5 MB

    # receipt header
    STORE_NAME = os.getenv("STORE_NAME", "KALAN VASTRALYA")
    STORE_ADDRESS = os.getenv("STORE_ADDRESS", "254B, Opp RJS Plaza, Pataudi Road, Haily Mandi")
    STORE_PHONE = os.getenv("STORE_PHONE", "8007792000, 9416930965")
    STORE_GSTIN = os.getenv("STORE_GSTIN", "06AEBPY4971P1ZN")
    GST_RATE = os.getenv("GST_RATE", "0.05")  # split evenly into SGST + CGST
