"""Element builders for the JMeter JMX file format.

Small helpers that create the property nodes (stringProp, boolProp,
intProp, elementProp, collectionProp) and test elements that make up a JMX
tree, plus the final serialization pass.
"""

import re
import xml.etree.ElementTree as ET
from typing import Optional
from xml.dom import minidom

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

# Characters outside the XML 1.0 Char production
_INVALID_XML_CHARS = re.compile(r"[^\u0009\u000A\u000D\u0020-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]")


def string_prop(parent: ET.Element, name: str, value: Optional[str] = "") -> ET.Element:
    """Append a stringProp; an empty value yields an empty element."""
    prop = ET.SubElement(parent, "stringProp", {"name": name})
    if value:
        prop.text = value
    return prop


def bool_prop(parent: ET.Element, name: str, value: bool) -> ET.Element:
    prop = ET.SubElement(parent, "boolProp", {"name": name})
    prop.text = "true" if value else "false"
    return prop


def int_prop(parent: ET.Element, name: str, value: int) -> ET.Element:
    prop = ET.SubElement(parent, "intProp", {"name": name})
    prop.text = str(value)
    return prop


def collection_prop(parent: ET.Element, name: str) -> ET.Element:
    return ET.SubElement(parent, "collectionProp", {"name": name})


def element_prop(parent: ET.Element, name: str, element_type: str, **attrs: str) -> ET.Element:
    """Append an elementProp with name, elementType and any extra attributes."""
    attributes = {"name": name, "elementType": element_type}
    attributes.update(attrs)
    return ET.SubElement(parent, "elementProp", attributes)


def test_element(tag: str, guiclass: str, testname: str, testclass: Optional[str] = None) -> ET.Element:
    """Create a top-level test element (sampler, config, assertion, listener).

    Args:
        tag: Element tag, also used as testclass unless one is given
        guiclass: JMeter GUI class
        testname: Display name
        testclass: Explicit testclass (defaults to tag)

    Returns:
        New, unattached element
    """
    return ET.Element(
        tag,
        {
            "guiclass": guiclass,
            "testclass": testclass or tag,
            "testname": testname,
            "enabled": "true",
        },
    )


def arguments_prop(parent: ET.Element, name: str, gui: bool = True) -> ET.Element:
    """Append an Arguments elementProp and return its Arguments.arguments collection."""
    if gui:
        elem = element_prop(
            parent,
            name,
            "Arguments",
            guiclass="HTTPArgumentsPanel" if name.startswith("HTTPsampler") else "ArgumentsPanel",
            testclass="Arguments",
            testname="User Defined Variables",
            enabled="true",
        )
    else:
        elem = element_prop(parent, name, "Arguments")
    return collection_prop(elem, "Arguments.arguments")


def add_argument(collection: ET.Element, name: str, value: str) -> ET.Element:
    """Append a plain name=value Argument (user defined variable)."""
    arg = element_prop(collection, name, "Argument")
    string_prop(arg, "Argument.name", name)
    string_prop(arg, "Argument.value", value)
    string_prop(arg, "Argument.metadata", "=")
    return arg


def add_http_argument(
    collection: ET.Element, name: str, value: str, always_encode: bool = False
) -> ET.Element:
    """Append an HTTPArgument; an empty name marks a raw request body."""
    arg = element_prop(collection, name, "HTTPArgument")
    bool_prop(arg, "HTTPArgument.always_encode", always_encode)
    if name:
        string_prop(arg, "Argument.name", name)
    string_prop(arg, "Argument.value", value)
    string_prop(arg, "Argument.metadata", "=")
    if name:
        bool_prop(arg, "HTTPArgument.use_equals", True)
    return arg


def append_with_tree(parent: ET.Element, element: ET.Element) -> ET.Element:
    """Append an element followed by its companion hashTree.

    Every test element inside a hashTree is paired with a hashTree holding
    its children.

    Returns:
        The new (empty) hashTree for the element's children
    """
    parent.append(element)
    return ET.SubElement(parent, "hashTree")


def serialize(root: ET.Element) -> str:
    """Serialize a JMX tree with 2-space indentation and an XML declaration.

    Text and attribute values are cleaned of characters XML 1.0 cannot
    carry (control characters other than tab, newline and carriage return),
    in place, before the tree is written.

    Args:
        root: jmeterTestPlan element

    Returns:
        Complete XML document text ending with a newline
    """
    _strip_invalid_chars(root)
    rough_string = ET.tostring(root, encoding="unicode")
    reparsed = minidom.parseString(rough_string)
    pretty_xml = reparsed.toprettyxml(indent="  ")

    # Replace minidom's bare declaration; text nodes are written inline so
    # multi-line request bodies survive untouched
    _, _, body = pretty_xml.partition("\n")

    return f"{XML_DECLARATION}\n{body.rstrip()}\n"


def _strip_invalid_chars(root: ET.Element) -> None:
    for elem in root.iter():
        if elem.text:
            elem.text = _INVALID_XML_CHARS.sub("", elem.text)
        if elem.tail:
            elem.tail = _INVALID_XML_CHARS.sub("", elem.tail)
        for key, value in elem.attrib.items():
            elem.attrib[key] = _INVALID_XML_CHARS.sub("", value)
