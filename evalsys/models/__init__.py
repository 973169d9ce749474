from .admin import Admin
from .evaluator import Evaluator
from .candidate import Candidate
from .category_option import CategoryOption
from .category import EvaluationCategory
from .item import EvaluationItem
from .submission import EvaluationSubmission
from .preset_score import CandidatePresetScore
from .system_config import SystemConfig
