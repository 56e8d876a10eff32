"""이벤트 유형 상수"""


class EventTypes:
    """이벤트 유형 문자열 상수"""

    # conversation runner
    DIALOGUE_STARTED = "dialogue_started"
    DIALOGUE_NODE_ENTERED = "dialogue_node_entered"
    DIALOGUE_RESPONSE_SELECTED = "dialogue_response_selected"
    DIALOGUE_EFFECT_FAILED = "dialogue_effect_failed"
    DIALOGUE_ENDED = "dialogue_ended"

    # persistence
    DIALOGUE_SAVED = "dialogue_saved"
    DIALOGUE_DELETED = "dialogue_deleted"
