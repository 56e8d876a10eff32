"""대화 그래프 열거형

직렬화 문서의 `type` 태그 값과 1:1 대응한다.
"""

from enum import Enum


class NodeType(str, Enum):
    NPC_SPEECH = "npc_speech"
    PLAYER_CHOICE = "player_choice"
    SKILL_CHECK = "skill_check"
    SHOP = "shop"
    QUEST_OFFER = "quest_offer"
    QUEST_TURNIN = "quest_turnin"
    REWARD = "reward"
    SERVICE = "service"
    BANK = "bank"
    HIRE = "hire"
    STABLE = "stable"
    BRANCH = "branch"
    END = "end"


class ConditionType(str, Enum):
    QUEST_STATUS = "quest_status"
    QUEST_OBJECTIVE = "quest_objective"
    FACTION_RANK = "faction_rank"
    FACTION_REPUTATION = "faction_reputation"
    RELATIONSHIP = "relationship"
    PLAYER_LEVEL = "player_level"
    PLAYER_CLASS = "player_class"
    PLAYER_RACE = "player_race"
    HAS_ITEM = "has_item"
    HAS_GOLD = "has_gold"
    FLAG = "flag"
    TIME = "time"
    PREVIOUS_CHOICE = "previous_choice"
    RANDOM = "random"


class EffectType(str, Enum):
    MODIFY_RELATIONSHIP = "modify_relationship"
    MODIFY_FACTION_REP = "modify_faction_reputation"
    SET_FLAG = "set_flag"
    GIVE_ITEM = "give_item"
    TAKE_ITEM = "take_item"
    GIVE_GOLD = "give_gold"
    TAKE_GOLD = "take_gold"
    GIVE_XP = "give_xp"
    START_QUEST = "start_quest"
    COMPLETE_QUEST = "complete_quest"
    FAIL_QUEST = "fail_quest"
    COMPLETE_OBJECTIVE = "complete_objective"
    ADD_BOUNTY = "add_bounty"
    CHAT_MESSAGE = "chat_message"
    UNLOCK_AREA = "unlock_area"
    PLAY_SOUND = "play_sound"
    PLAY_ANIMATION = "play_animation"


class Comparison(str, Enum):
    EQUALS = "eq"
    NOT_EQUALS = "neq"
    GREATER_THAN = "gt"
    GREATER_THAN_OR_EQUAL = "gte"
    LESS_THAN = "lt"
    LESS_THAN_OR_EQUAL = "lte"


class FlagScope(str, Enum):
    """플래그 저장 범위"""

    WORLD = "world"
    ACTOR = "actor"  # 행동 캐릭터(플레이어)
    NPC = "npc"  # 대화 상대


class ConnectionKind(str, Enum):
    """connect_nodes가 설정하는 출력 엣지 종류"""

    NEXT = "next"
    RESPONSE = "response"
    SUCCESS = "success"
    FAILURE = "failure"
    CRIT_SUCCESS = "crit_success"
    CRIT_FAILURE = "crit_failure"
    ACCEPT = "accept"
    DECLINE = "decline"
    DEFAULT = "default"
    BRANCH = "branch"
