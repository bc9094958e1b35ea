from typing import Optional

from fastapi import Header, HTTPException, status


def get_student_id(x_student_id: Optional[str] = Header(None)) -> str:
    """Caller identity handed over by the upstream authentication layer"""
    if not x_student_id or not x_student_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "NOT_AUTHENTICATED", "message": "Authentication required"},
        )
    return x_student_id.strip()


def get_optional_student_id(x_student_id: Optional[str] = Header(None)) -> Optional[str]:
    if x_student_id and x_student_id.strip():
        return x_student_id.strip()
    return None
