"""Engine-independent description of a search index.

The schema inferencer produces these models; each search client translates
them into its backend's own index definition.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict

KEY_FIELD_DEFAULT = "id"
TEXT_FIELD = "textRepresentation"
VECTOR_FIELD = "contentVector"


class FieldType(str, Enum):
    STRING = "string"
    INT64 = "int64"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    VECTOR = "vector"


class VectorSearchConfig(BaseModel):
    """Approximate-nearest-neighbour settings attached to the vector field.

    Attributes:
        dimensions (int): Length of every vector stored in the field.
        algorithm_name (str): Name of the algorithm configuration in the index.
        kind (str): Graph algorithm, always "hnsw".
        metric (str): Distance metric, always "cosine".
        m (int): Bi-directional links per graph node.
        ef_construction (int): Candidate list size while building the graph.
        ef_search (int): Candidate list size while querying.
        profile_name (str): Name of the profile the vector field references.
    """

    model_config = ConfigDict(frozen=True)

    dimensions: int = 3072
    algorithm_name: str = "hnsw-config"
    kind: str = "hnsw"
    metric: str = "cosine"
    m: int = 4
    ef_construction: int = 400
    ef_search: int = 500
    profile_name: str = "vector-profile"


class FieldSchema(BaseModel):
    """One field of the target index with its search capabilities."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: FieldType
    key: bool = False
    searchable: bool = False
    filterable: bool = False
    sortable: bool = False
    facetable: bool = False
    vector_dimensions: int | None = None
    vector_profile: str | None = None
