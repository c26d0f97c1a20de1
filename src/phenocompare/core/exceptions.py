"""Custom exceptions for PhenoCompare"""

class PhenoCompareError(Exception):
    """Base exception for PhenoCompare"""
    pass

class UnresolvableTermError(PhenoCompareError):
    """Annotated term is not present in the ontology"""
    def __init__(self, term_id: str, patient_id: str = None):
        self.term_id = term_id
        self.patient_id = patient_id
        if patient_id is None:
            message = f"Term {term_id} not found in ontology"
        else:
            message = f"Term {term_id} of patient {patient_id} not found in ontology"
        super().__init__(message)

# Name used by the aggregator's callers
UnknownTermError = UnresolvableTermError

class EmptyGroupError(PhenoCompareError):
    """Cohort (or gene list) with no members"""
    def __init__(self, group_name: str, details: str = ""):
        self.group_name = group_name
        self.details = details
        message = f"Empty group '{group_name}'"
        if details:
            message = f"{message}: {details}"
        super().__init__(message)

class DataSourceError(PhenoCompareError):
    """Ontology, patient or association data could not be read"""
    def __init__(self, path: str, details: str = ""):
        self.path = str(path)
        self.details = details
        super().__init__(f"Cannot read {path}: {details}")

class OutputWriteError(PhenoCompareError):
    """Result table could not be written"""
    def __init__(self, path: str, details: str = ""):
        self.path = str(path)
        self.details = details
        super().__init__(f"Cannot write {path}: {details}")

class ConfigurationError(PhenoCompareError):
    """Configuration related errors"""
    pass
