# This file makes the 'models' directory a Python package.

from .user import User
from .user_relation import UserRelation
from .user_stats import UserStats
from .content import Concept, Term, Hint
from .dataset import Dataset, DatasetConcept
from .homework import HomeworkAssignment, HomeworkProgress
from .notification import Notification
from .game_log import GameLog
