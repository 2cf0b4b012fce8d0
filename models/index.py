import importlib
from pathlib import Path
from config.database import engine, SessionLocal, Base

PROJECT_ROOT = Path(__file__).parent.parent

# Dictionary to store loaded models, keyed by table name
models = {}


def _module_name(path: Path) -> str:
    return ".".join(path.relative_to(PROJECT_ROOT).with_suffix("").parts)


# Function to load models from the `api` directory
def scan_models(directory: Path):
    for item in sorted(directory.rglob("*_model.py")):
        # imported by dotted name so a model class is only ever declared once
        module = importlib.import_module(_module_name(item))

        for attr_name in dir(module):
            attr = getattr(module, attr_name)
            if hasattr(attr, "__tablename__"):  # Check if it is a SQLAlchemy model
                models[attr.__tablename__] = attr


# Scan the `api` directory for models
scan_models(PROJECT_ROOT / "api")


# Create tables in the database
def init_db():
    Base.metadata.create_all(bind=engine)


# Exporting components
__all__ = ["engine", "SessionLocal", "Base", "models", "init_db"]
