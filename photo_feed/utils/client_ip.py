"""
클라이언트 IP 추출 유틸리티.

프록시나 로드밸런서를 거치는 경우 실제 클라이언트 IP를 추출합니다.
Rate limit 키와 요청 로그에 사용됩니다.
"""
from typing import Optional

from starlette.requests import Request

# 순서대로 확인하는 프록시 헤더 (X-Forwarded-For는 별도 처리)
_SINGLE_IP_HEADERS = ("X-Real-IP", "CF-Connecting-IP", "True-Client-IP")


def get_client_ip(request: Request) -> Optional[str]:
    """
    요청에서 실제 클라이언트 IP를 추출합니다.

    1. X-Forwarded-For 첫 번째 값 ("client, proxy1, proxy2")
    2. X-Real-IP / CF-Connecting-IP / True-Client-IP
    3. request.client.host (직접 연결)

    Security:
        이 헤더들은 위조 가능하므로 신뢰할 수 있는 프록시 뒤에서만 의미가 있습니다.
    """
    x_forwarded_for = request.headers.get("X-Forwarded-For")
    if x_forwarded_for:
        client_ip = x_forwarded_for.split(",")[0].strip()
        if client_ip:
            return client_ip

    for header in _SINGLE_IP_HEADERS:
        value = request.headers.get(header)
        if value and value.strip():
            return value.strip()

    if request.client:
        return request.client.host

    return None
