# toddler_fun/models.py
from sqlalchemy import MetaData, Table, Column, Integer, String, Text

metadata = MetaData()

# Integer columns are 32-bit on Postgres
MAX_INTEGER = 2**31 - 1

activities = Table(
    "activities",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("category", String(255), nullable=False),
    Column("title", String(255), nullable=False, unique=True),
    Column("description", Text, nullable=False),
    Column("completion_count", Integer, nullable=False, default=0, server_default="0"),
)

# Suggested in the UI, not enforced by the table
DEFAULT_CATEGORIES = [
    "Moving and Grooving",
    "Fine Motor Fun",
    "Quiet Time Adventures",
    "Sensory Explorations (Dry)",
    "Imaginative Play",
    "Problem Solving & Early Learning",
    "Outdoor (If Possible and Safe)",
]
