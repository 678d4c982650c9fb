from healthscan.errors import KnowledgeBaseError
from healthscan.ingredients_logic.analysis import analyze
from healthscan.knowledge_base import KnowledgeBase, KnowledgeBaseStore
from healthscan.models import AnalysisResult, IngredientRecord, Recommendation

__version__ = "0.1.0"
