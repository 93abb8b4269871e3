from typing import Annotated

from fastapi import Depends

from ..ai.dependencies import GatewayDep
from .services.analysis import EditorialAnalysisAdvisor
from .services.categorization import CategorizationAdvisor
from .services.tagging import TagSuggestionAdvisor


def get_categorization_advisor(gateway: GatewayDep) -> CategorizationAdvisor:
    return CategorizationAdvisor(gateway)


def get_tag_advisor(gateway: GatewayDep) -> TagSuggestionAdvisor:
    return TagSuggestionAdvisor(gateway)


def get_analysis_advisor(gateway: GatewayDep) -> EditorialAnalysisAdvisor:
    return EditorialAnalysisAdvisor(gateway)


CategorizerDep = Annotated[CategorizationAdvisor, Depends(get_categorization_advisor)]
TagAdvisorDep = Annotated[TagSuggestionAdvisor, Depends(get_tag_advisor)]
AnalystDep = Annotated[EditorialAnalysisAdvisor, Depends(get_analysis_advisor)]
