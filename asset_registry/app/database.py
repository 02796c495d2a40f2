from contextlib import contextmanager

from asset_registry.app import db
from asset_registry.app.errors import NotFound


@contextmanager
def transaction():
    """Commit everything done in the block, or roll all of it back.

    Request handlers load the records, run the lifecycle checks and apply
    the derived fields inside one block, so a failed check leaves nothing
    half-written.
    """
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def get_or_404(model, ident, label=None):
    record = db.session.get(model, ident)
    if record is None:
        raise NotFound(f"{label or model.__name__} not found.")
    return record
