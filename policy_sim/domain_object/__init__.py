from .action import Action, ACTION_COUNT
from .transition import StepResult, Reward, Coord
from .environment import Environment, GridSize
from .policy import Policy, QVector, Q_TABLE
from .state import AgentState, RunMetrics, RunHistory, Snapshot, StepOutcome
