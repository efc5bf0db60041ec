"""Typed link (father, mother, guardian, ...) between one parent and one student."""
from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship, validates

from app.core.validation import check_max_length, require_text
from app.db.session import Base


def _same_profile(a, b) -> bool:
    """Same object, or two copies of the same stored profile."""
    if a is b:
        return True
    if a is None or b is None or type(a) is not type(b):
        return False
    return a.user_id is not None and a.user_id == b.user_id


class ParentStudentRelationship(Base):
    """One row per (parent, student) pair.

    Business identity is the pair, not the surrogate id: two relationships for
    the same parent and student compare equal whatever their type label.
    """

    __tablename__ = "students_parents"
    __table_args__ = (
        UniqueConstraint("parent_user_id", "student_user_id", name="uq_students_parents_pair"),
    )
    # Detaching from either owner makes the row an orphan.
    __mapper_args__ = {"legacy_is_orphan": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    parent_user_id = Column(Integer, ForeignKey("parents.user_id", ondelete="CASCADE"), nullable=False)
    student_user_id = Column(Integer, ForeignKey("students.user_id", ondelete="CASCADE"), nullable=False)
    relationship_type = Column(String(50), nullable=False)

    parent = relationship("ParentProfile", back_populates="parent_student_relationships")
    student = relationship("StudentProfile", back_populates="parent_relationships")

    def __init__(self, parent, student, relationship_type: str) -> None:
        require_text(relationship_type, "relationship_type")
        self.relationship_type = relationship_type
        self.parent = parent
        self.student = student

    @validates("relationship_type")
    def _validate_relationship_type(self, key: str, value: str) -> str:
        require_text(value, key)
        return check_max_length(value, key, 50)

    def detach(self) -> None:
        """Unlink from both owners; the row is deleted at the next flush."""
        # Removed by identity: equal relationships of one pair can share an owner list.
        for owner, key in ((self.parent, "parent_student_relationships"), (self.student, "parent_relationships")):
            if owner is None:
                continue
            items = getattr(owner, key)
            for index, item in enumerate(items):
                if item is self:
                    del items[index]
                    break
        self.parent = None
        self.student = None

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, ParentStudentRelationship):
            return NotImplemented
        return _same_profile(self.parent, other.parent) and _same_profile(self.student, other.student)

    def __hash__(self) -> int:
        # Ids appear on insert and owners can be reassigned, so nothing mutable goes into the hash.
        return hash(ParentStudentRelationship)

    def __repr__(self) -> str:
        return (
            f"<ParentStudentRelationship id={self.id} parent={self.parent_user_id} "
            f"student={self.student_user_id} type={self.relationship_type!r}>"
        )
