from .user import User
from .swipe import Swipe, SwipeAction, TargetType
from .match import Match, normalize_pair
from .message import Message
