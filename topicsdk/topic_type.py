"""Topic kinds recognized by the namespace model builder."""

from enum import Enum


class TopicType(Enum):
    """Represents the topic type for an API ref topic."""

    NOT_YET_KNOWN = "not_yet_known"
    ATTACHED_PROPERTY = "attached_property"
    ATTRIBUTE = "attribute"
    CLASS = "class"
    DELEGATE = "delegate"
    ENUM = "enum"
    EVENT = "event"
    INTERFACE = "interface"
    METHOD = "method"
    NAMESPACE = "namespace"
    PROPERTY = "property"
    STRUCT = "struct"


# metadata@type values. Overload pages, node pages, start pages and the like
# are deliberately absent so they map to NOT_YET_KNOWN.
_TYPE_TAGS: dict[str, TopicType] = {
    "attachedmember_winrt": TopicType.ATTACHED_PROPERTY,
    "attribute": TopicType.ATTRIBUTE,
    "class_winrt": TopicType.CLASS,
    "delegate": TopicType.DELEGATE,
    "enum_winrt": TopicType.ENUM,
    "event_winrt": TopicType.EVENT,
    "function": TopicType.METHOD,
    "interface_winrt": TopicType.INTERFACE,
    "method_winrt": TopicType.METHOD,
    "namespace": TopicType.NAMESPACE,
    "property_winrt": TopicType.PROPERTY,
    "struct_winrt": TopicType.STRUCT,
}

MEMBER_TOPIC_TYPES = frozenset(
    {
        TopicType.ATTACHED_PROPERTY,
        TopicType.EVENT,
        TopicType.METHOD,
        TopicType.PROPERTY,
    }
)

TYPE_TOPIC_TYPES = frozenset(
    {
        TopicType.ATTRIBUTE,
        TopicType.CLASS,
        TopicType.DELEGATE,
        TopicType.ENUM,
        TopicType.INTERFACE,
        TopicType.STRUCT,
    }
)


def topic_type_from_tag(tag: str | None) -> TopicType:
    """Map a metadata@type value to a TopicType."""
    if tag is None:
        return TopicType.NOT_YET_KNOWN
    return _TYPE_TAGS.get(tag, TopicType.NOT_YET_KNOWN)


def is_member_topic_type(topic_type: TopicType) -> bool:
    """Check if the topic type describes a member (method, property, etc.)."""
    return topic_type in MEMBER_TOPIC_TYPES


def is_type_topic_type(topic_type: TopicType) -> bool:
    """Check if the topic type describes a type (class, struct, etc.)."""
    return topic_type in TYPE_TOPIC_TYPES
