"""
Database models for the coursework grading pipeline.

Subjects and assignments are created by the portal; the grading pipeline
only reads them and mutates the score/status columns of submissions.
"""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    teacher_email = Column(String(255), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    assignments = relationship("Assignment", back_populates="subject")


class Assignment(Base):
    """
    Assignment with its hidden fixtures.

    The fixture paths point at teacher-provided files (test input, expected
    output, question text). They are immutable once the assignment exists
    and are removed together with it.
    """
    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False)
    title = Column(String(255), nullable=False)

    input_path = Column(String(1024), nullable=False)
    output_path = Column(String(1024), nullable=False)
    question_path = Column(String(1024), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    subject = relationship("Subject", back_populates="assignments")
    submissions = relationship("Submission", back_populates="assignment", order_by="Submission.id")


class Submission(Base):
    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    assignment_id = Column(Integer, ForeignKey("assignments.id"), nullable=False)
    student_email = Column(String(255), nullable=False)
    source_path = Column(String(1024), nullable=False)

    score = Column(Integer, nullable=False, default=0, server_default="0")
    status = Column(String(50), nullable=False, default="pending", server_default="pending")
    # Status values: pending, graded, failed
    failure_reason = Column(String(50), nullable=True)
    failure_detail = Column(Text, nullable=True)

    submitted_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    graded_at = Column(DateTime(timezone=True), nullable=True)

    assignment = relationship("Assignment", back_populates="submissions")
