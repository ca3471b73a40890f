from fastapi import Request

from mindyamsanzi.services.counselor_service import CounselorService


def get_counselor_service(request: Request) -> CounselorService:
    return request.app.state.counselor
