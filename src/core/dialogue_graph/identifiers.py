"""그래프 엔티티 ID 생성"""

import time
import uuid


def generate_id() -> str:
    """노드/응답/조건/효과 공용 ID. 16자 hex."""
    return uuid.uuid4().hex[:16]


def now_ms() -> int:
    """타임스탬프 (epoch 밀리초). 직렬화 문서의 createdAt/updatedAt 단위."""
    return int(time.time() * 1000)
