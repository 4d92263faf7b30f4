from .crud_user import user
from .crud_relation import relation
from .crud_dataset import dataset
from .crud_content import concept, term, hint
from .crud_homework import assignment, homework_progress
from .crud_notification import notification
from .crud_game import game_log, user_stats
