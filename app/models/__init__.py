# Hospital Bed Tracker: database models
# Import all models here for SQLAlchemy discovery

from app.models.status import Status                         # noqa
from app.models.sector import Sector                         # noqa
from app.models.service import Service                       # noqa
from app.models.bed import Bed                               # noqa
from app.models.history_entry import HistoryEntry            # noqa
from app.models.task_item import TaskItem                    # noqa
from app.models.sequence_counter import SequenceCounter      # noqa
from app.models.schedule_settings import ScheduleSettings    # noqa
