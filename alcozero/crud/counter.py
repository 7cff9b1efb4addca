from sqlalchemy.orm import Session

from alcozero.models.counter import Counter


def next_value(db: Session, name: str) -> int:
    """Increment and return the named counter; the row is locked where the database supports it."""
    counter = db.query(Counter).filter(Counter.name == name).with_for_update().first()
    if counter is None:
        counter = Counter(name=name, current=0)
        db.add(counter)
    counter.current = (counter.current or 0) + 1
    db.flush()
    return counter.current
