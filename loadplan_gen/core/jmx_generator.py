"""JMX Generator for creating JMeter test plans from parsed API specifications.

This module provides the JMXGenerator class for generating JMeter JMX files
from ParsedSpec objects (OpenAPI, Swagger or HAR). It builds an in-memory
element tree with one Thread Group per tag or path bucket, one HTTP Sampler
per operation, and optional assertions, extractors, auth and CSV config,
then serializes the tree in a single pass.
"""

import json
import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Optional
from urllib.parse import quote

from loadplan_gen.core.base_url import parse_url_parts
from loadplan_gen.core.data_structures import (
    Operation,
    Parameter,
    ParsedSpec,
    SecurityScheme,
    UrlParts,
    format_value,
)
from loadplan_gen.core.jmx_elements import (
    add_argument,
    add_http_argument,
    append_with_tree,
    arguments_prop,
    bool_prop,
    collection_prop,
    element_prop,
    int_prop,
    serialize,
    string_prop,
    test_element,
)
from loadplan_gen.core.load_config import GROUP_BY_PATH, LoadConfig
from loadplan_gen.core.openapi_parser import FORM_CONTENT_TYPE
from loadplan_gen.core.sample_generator import Clock, SampleGenerator, iso_timestamp, utc_now
from loadplan_gen.core.schema_model import KIND_ARRAY, KIND_OBJECT
from loadplan_gen.exceptions import PlanGenerationException

logger = logging.getLogger(__name__)

# Methods that carry a request body in generated samplers
BODY_METHODS = ("POST", "PUT", "PATCH", "DELETE")

DEFAULT_CONTENT_TYPE = "application/json"

DEFAULT_TAG_BUCKET = "default"
DEFAULT_PATH_BUCKET = "root"

# Response codes accepted by the success assertion, keyed by their stringProp names
SUCCESS_CODES = [
    ("49586", "200"),
    ("49587", "201"),
    ("49588", "202"),
    ("49589", "204"),
]

# Fields extracted when a response schema exposes no id-like properties
DEFAULT_CORRELATION_FIELDS = ["id", "userId", "orderId", "productId", "customerId", "petId"]

# SampleSaveConfiguration shared by all result listeners
SAVE_CONFIG = {
    "time": "true",
    "latency": "true",
    "timestamp": "true",
    "success": "true",
    "label": "true",
    "code": "true",
    "message": "true",
    "threadName": "true",
    "dataType": "true",
    "encoding": "false",
    "assertions": "true",
    "subresults": "true",
    "responseData": "false",
    "samplerData": "false",
    "xml": "false",
    "fieldNames": "true",
    "responseHeaders": "false",
    "requestHeaders": "false",
    "responseDataOnError": "false",
    "saveAssertionResultsFailureMessage": "true",
    "assertionsResultsToSave": "0",
    "bytes": "true",
    "sentBytes": "true",
    "url": "true",
    "threadCounts": "true",
    "idleTime": "true",
    "connectTime": "true",
}

_PATH_PARAMETER = re.compile(r"\{([^}]+)\}")


def convert_path_parameters(path: str) -> str:
    """Rewrite {param} placeholders to JMeter ${param} variables.

    Example:
        >>> convert_path_parameters("/users/{id}/items/{itemId}")
        '/users/${id}/items/${itemId}'
    """
    return _PATH_PARAMETER.sub(r"${\1}", path)


def build_sampler_path(operation_path: str, url_path: str = "", base_path: str = "") -> str:
    """Assemble the full sampler path.

    Concatenates the base URL's own path, a Swagger 2.0 basePath that is not
    already part of it, and the operation path, then collapses empty segments.

    Example:
        >>> build_sampler_path("/users/{id}", "/api/", "/v1")
        '/api/v1/users/${id}'
    """
    components = []
    if url_path:
        components.append(url_path)
    if base_path and base_path != "/" and base_path not in url_path:
        components.append(base_path)
    components.append(convert_path_parameters(operation_path))

    segments = [segment for segment in "/".join(components).split("/") if segment]
    return "/" + "/".join(segments)


def bucket_name(operation: Operation, grouping: str) -> str:
    """Return the thread group bucket for an operation."""
    if grouping == GROUP_BY_PATH:
        segments = operation.path.split("/")
        if len(segments) > 1 and segments[1]:
            return segments[1]
        return DEFAULT_PATH_BUCKET
    return operation.tags[0] if operation.tags else DEFAULT_TAG_BUCKET


def group_operations(operations: list[Operation], grouping: str) -> dict[str, list[Operation]]:
    """Bucket operations by first tag or first path segment, in first-seen order."""
    groups: dict[str, list[Operation]] = {}
    for operation in operations:
        groups.setdefault(bucket_name(operation, grouping), []).append(operation)
    return groups


def thread_group_name(bucket: str) -> str:
    """Example: 'users' -> 'Users APIs'."""
    return f"{bucket[:1].upper()}{bucket[1:]} APIs"


def _form_fields(body: Optional[tuple[str, Any]]) -> Optional[dict[str, Any]]:
    """Return the field mapping of a url-encoded form body, or None for any other body."""
    if body is None:
        return None
    content_type, value = body
    if content_type.split(";")[0].strip().lower() != FORM_CONTENT_TYPE or not isinstance(value, dict):
        return None
    return value


def _parameter_value(param: Parameter) -> str:
    """Recorded or declared value, else a ${name} variable. Empty values are kept."""
    value = param.sample_value()
    return value if value is not None else f"${{{param.name}}}"


class JMXGenerator:
    """Generates JMeter JMX test plans from parsed specifications.

    The generated plan has the following structure:
    - Test Plan (root container, carries domain/port/protocol variables)
    - Thread Group per bucket (tag or first path segment)
      - HTTP Header Manager (Content-Type and Accept: application/json)
      - Authentication elements for declared security schemes (optional)
      - HTTP Sampler per operation, each followed by its own hashTree with
        assertions and JSON extractors
    - CSV Data Set Config (optional)
    - Summary Report and Aggregate Report listeners (optional)
    - View Results Tree listener

    Samplers reference ${domain}, ${port} and ${protocol}, so retargeting a
    plan means editing the three Test Plan variables. Operations recorded
    against another host (HAR) carry literal connection settings instead.
    """

    JMETER_VERSION = "5.5"

    def __init__(self, clock: Optional[Clock] = None) -> None:
        """Initialize the JMX Generator.

        Args:
            clock: Callable returning the current time, used for timestamp
                   sample values (default: UTC now)
        """
        self._clock = clock or utc_now

    def generate(
        self,
        parsed: ParsedSpec,
        output_path: str,
        config: Optional[LoadConfig] = None,
        base_url: Optional[str] = None,
        operation_ids: Optional[list[str]] = None,
    ) -> dict:
        """Generate a JMeter JMX file from a parsed specification.

        Args:
            parsed: ParsedSpec from OpenAPIParser or HARParser
            output_path: Path where to save the JMX file
            config: Load configuration (default: LoadConfig())
            base_url: Override base URL from spec (e.g., for different environments)
            operation_ids: Keep only operations with these operationIds (None = all)

        Returns:
            Dictionary with generation results:
            {
                "success": bool,
                "jmx_path": str,
                "base_url": str,
                "thread_groups": int,
                "samplers_created": int,
                "assertions_added": int,
                "extractors_added": int,
                "summary": str
            }

        Raises:
            PlanGenerationException: If generation fails due to invalid data or write errors
        """
        config = config or LoadConfig()
        try:
            effective_base_url = self._effective_base_url(parsed, base_url)
            root = self._assemble(parsed, config, effective_base_url, operation_ids)
            xml_string = serialize(root)

            output_file = Path(output_path)
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_text(xml_string, encoding="utf-8")

            thread_groups = len(root.findall(".//ThreadGroup"))
            samplers_created = len(root.findall(".//HTTPSamplerProxy"))
            assertions_added = len(root.findall(".//ResponseAssertion")) + len(
                root.findall(".//DurationAssertion")
            )
            extractors_added = len(root.findall(".//JSONPostProcessor"))

            if config.duration is not None:
                load_profile = (
                    f"{config.thread_count} threads, {config.ramp_up}s ramp-up, "
                    f"{config.duration}s duration"
                )
            else:
                load_profile = (
                    f"{config.thread_count} threads, {config.ramp_up}s ramp-up, "
                    f"{config.loop_count} loop(s)"
                )

            summary = (
                f"Generated JMX test plan with {thread_groups} thread groups, "
                f"{samplers_created} HTTP samplers, {assertions_added} assertions and "
                f"{extractors_added} extractors. Load profile: {load_profile}."
            )
            logger.info(summary)

            return {
                "success": True,
                "jmx_path": str(output_file.absolute()),
                "base_url": effective_base_url,
                "thread_groups": thread_groups,
                "samplers_created": samplers_created,
                "assertions_added": assertions_added,
                "extractors_added": extractors_added,
                "summary": summary,
            }

        except Exception as e:
            if isinstance(e, PlanGenerationException):
                raise
            raise PlanGenerationException(f"Failed to generate JMX file: {str(e)}") from e

    def build_document(
        self,
        parsed: ParsedSpec,
        config: Optional[LoadConfig] = None,
        base_url: Optional[str] = None,
        operation_ids: Optional[list[str]] = None,
    ) -> str:
        """Build the JMX document text without writing it to disk."""
        return serialize(self.build_tree(parsed, config or LoadConfig(), base_url, operation_ids))

    def build_tree(
        self,
        parsed: ParsedSpec,
        config: LoadConfig,
        base_url: Optional[str] = None,
        operation_ids: Optional[list[str]] = None,
    ) -> ET.Element:
        """Build the jmeterTestPlan element tree.

        Raises:
            PlanGenerationException: If there are no operations to generate
        """
        return self._assemble(parsed, config, self._effective_base_url(parsed, base_url), operation_ids)

    def _assemble(
        self,
        parsed: ParsedSpec,
        config: LoadConfig,
        effective_base_url: str,
        operation_ids: Optional[list[str]],
    ) -> ET.Element:
        operations = parsed.operations
        if operation_ids:
            operations = [op for op in operations if op.operation_id in operation_ids]

        if not operations:
            available = [op.operation_id or op.label for op in parsed.operations]
            raise PlanGenerationException(
                f"No operations found to generate. Available operations: {available}"
            )

        url_parts = parse_url_parts(effective_base_url)
        generator = SampleGenerator(parsed.spec, clock=self._clock)

        jmeter_test_plan = ET.Element(
            "jmeterTestPlan",
            {"version": "1.2", "properties": "5.0", "jmeter": self.JMETER_VERSION},
        )
        main_hashtree = ET.SubElement(jmeter_test_plan, "hashTree")

        test_plan_hashtree = append_with_tree(
            main_hashtree, self._create_test_plan(parsed, config, url_parts)
        )

        groups = group_operations(operations, config.grouping)
        for bucket, bucket_operations in groups.items():
            thread_group_hashtree = append_with_tree(
                test_plan_hashtree, self._create_thread_group(thread_group_name(bucket), config)
            )

            append_with_tree(
                thread_group_hashtree,
                self._create_header_manager(
                    {"Content-Type": DEFAULT_CONTENT_TYPE, "Accept": DEFAULT_CONTENT_TYPE}
                ),
            )

            if config.add_auth:
                for auth_element in self._create_auth_elements(parsed.security_schemes):
                    append_with_tree(thread_group_hashtree, auth_element)

            for operation in bucket_operations:
                self._append_sampler(
                    thread_group_hashtree, operation, parsed, config, url_parts, generator
                )

            logger.debug("Thread group '%s' with %d samplers", bucket, len(bucket_operations))

        if config.generate_csv_config:
            append_with_tree(test_plan_hashtree, self._create_csv_data_set(config))

        if config.enable_reporting:
            append_with_tree(
                test_plan_hashtree, self._create_listener("SummaryReport", "Summary Report")
            )
            append_with_tree(
                test_plan_hashtree, self._create_listener("StatVisualizer", "Aggregate Report")
            )

        append_with_tree(
            test_plan_hashtree,
            self._create_listener("ViewResultsFullVisualizer", "View Results Tree"),
        )

        return jmeter_test_plan

    def _effective_base_url(self, parsed: ParsedSpec, base_url: Optional[str]) -> str:
        effective = base_url or parsed.base_url
        if not effective:
            logger.warning("No base URL in spec and none given, falling back to https://localhost")
            return ""
        return effective

    def _append_sampler(
        self,
        parent: ET.Element,
        operation: Operation,
        parsed: ParsedSpec,
        config: LoadConfig,
        url_parts: UrlParts,
        generator: SampleGenerator,
    ) -> None:
        """Append one HTTP Sampler and its hashTree of children to a thread group."""
        if operation.server_url:
            target = parse_url_parts(operation.server_url)
            connection = (target.domain, target.port, target.protocol)
            path = build_sampler_path(operation.path, target.path)
        else:
            connection = ("${domain}", "${port}", "${protocol}")
            path = build_sampler_path(operation.path, url_parts.path, parsed.base_path)

        body = self.resolve_request_body(operation, generator, use_fallback=parsed.spec_type != "har")

        sampler = self._create_http_sampler(operation, path, connection, body, config)
        sampler_hashtree = append_with_tree(parent, sampler)

        headers: dict[str, str] = {}
        if body is not None and body[0].lower() != DEFAULT_CONTENT_TYPE:
            headers["Content-Type"] = body[0]
        for param in operation.parameters_in("header"):
            headers[param.name] = _parameter_value(param)
        if headers:
            append_with_tree(
                sampler_hashtree, self._create_header_manager(headers, "Request Headers")
            )

        if config.add_assertions:
            append_with_tree(sampler_hashtree, self._create_success_assertion())
            if config.response_time_threshold is not None:
                append_with_tree(
                    sampler_hashtree, self._create_duration_assertion(config.response_time_threshold)
                )

        if config.add_correlation:
            for field_name in self.correlation_fields(operation, generator):
                append_with_tree(sampler_hashtree, self._create_json_extractor(field_name))

    def resolve_request_body(
        self, operation: Operation, generator: SampleGenerator, use_fallback: bool = True
    ) -> Optional[tuple[str, Any]]:
        """Pick the request body value for an operation.

        Only POST, PUT, PATCH and DELETE carry a body. Tried in order:
        literal example on the preferred content entry, first entry of its
        examples map (its 'value' when present), schema-driven generation,
        and finally a generic fallback object.

        Args:
            operation: Operation to resolve
            generator: Sample generator bound to the spec
            use_fallback: Use the generic object when nothing else applies

        Returns:
            Tuple of (content_type, value), or None for no body
        """
        if operation.method not in BODY_METHODS:
            return None

        preferred = operation.request_body.preferred_media() if operation.request_body else None
        if preferred is not None:
            content_type, media = preferred
            if media.example is not None:
                return content_type, media.example
            if media.examples:
                first = next(iter(media.examples.values()))
                if isinstance(first, dict) and "value" in first:
                    return content_type, first["value"]
                if first is not None:
                    return content_type, first
            if media.schema is not None:
                return content_type, generator.generate(media.schema)

        if not use_fallback:
            return None

        logger.debug("No body definition for %s, using generic sample", operation.label)
        return DEFAULT_CONTENT_TYPE, self._fallback_body()

    def _fallback_body(self) -> dict[str, Any]:
        return {
            "id": 1,
            "name": "Sample Name",
            "description": "Sample Description",
            "status": "active",
            "timestamp": iso_timestamp(self._clock()),
        }

    def correlation_fields(self, operation: Operation, generator: SampleGenerator) -> list[str]:
        """Return id-like field names from the first 2xx response schema.

        Falls back to DEFAULT_CORRELATION_FIELDS when the response declares
        no such fields.
        """
        for code in sorted(operation.responses):
            if not code.startswith("2"):
                continue
            schema = self._response_schema(operation.responses[code])
            if schema is None:
                continue
            node = generator.resolve(schema)
            if node.kind == KIND_ARRAY and node.items is not None:
                node = generator.resolve(node.items)
            if node.kind != KIND_OBJECT:
                continue
            fields = [name for name in node.properties if name == "id" or name.endswith("Id")]
            if fields:
                return fields
            break

        return list(DEFAULT_CORRELATION_FIELDS)

    def _response_schema(self, response: Any) -> Optional[dict[str, Any]]:
        if not isinstance(response, dict):
            return None
        if isinstance(response.get("schema"), dict):
            return response["schema"]
        content = response.get("content")
        if isinstance(content, dict):
            for content_type, media in content.items():
                if "json" in content_type.lower() and isinstance(media, dict):
                    schema = media.get("schema")
                    return schema if isinstance(schema, dict) else None
        return None

    def _format_body(self, content_type: str, value: Any) -> str:
        if isinstance(value, str) and "json" not in content_type.lower():
            return value
        return json.dumps(value, indent=2, ensure_ascii=False)

    def _create_test_plan(
        self, parsed: ParsedSpec, config: LoadConfig, url_parts: UrlParts
    ) -> ET.Element:
        """Create JMeter Test Plan element with connection variables.

        Args:
            parsed: Parsed specification (used for the comment)
            config: Load configuration
            url_parts: Resolved base URL parts

        Returns:
            TestPlan XML Element
        """
        test_plan = test_element("TestPlan", "TestPlanGui", config.test_plan_name)

        string_prop(test_plan, "TestPlan.comments", self._plan_comments(parsed, config))
        bool_prop(test_plan, "TestPlan.functional_mode", False)
        bool_prop(test_plan, "TestPlan.tearDown_on_shutdown", True)
        bool_prop(test_plan, "TestPlan.serialize_threadgroups", False)

        variables = arguments_prop(test_plan, "TestPlan.user_defined_variables")
        add_argument(variables, "domain", url_parts.domain)
        add_argument(variables, "port", url_parts.port)
        add_argument(variables, "protocol", url_parts.protocol)

        string_prop(test_plan, "TestPlan.user_define_classpath", "")

        return test_plan

    def _plan_comments(self, parsed: ParsedSpec, config: LoadConfig) -> str:
        source = "HAR capture" if parsed.spec_type == "har" else "OpenAPI/Swagger specification"
        grouping = "Path" if config.grouping == GROUP_BY_PATH else "Tags"
        comments = f"Generated from {source} - Grouped by {grouping}"

        thresholds = []
        if config.response_time_threshold is not None:
            thresholds.append(f"response time {config.response_time_threshold} ms")
        if config.throughput_threshold is not None:
            thresholds.append(f"throughput {config.throughput_threshold:g} req/s")
        if config.error_rate_threshold is not None:
            thresholds.append(f"error rate {config.error_rate_threshold:g}%")
        if thresholds:
            comments += f". Thresholds: {', '.join(thresholds)}"

        return comments

    def _create_thread_group(self, name: str, config: LoadConfig) -> ET.Element:
        """Create JMeter Thread Group element.

        Args:
            name: Thread group display name
            config: Load configuration (threads, ramp-up, loops, duration)

        Returns:
            ThreadGroup XML Element
        """
        thread_group = test_element("ThreadGroup", "ThreadGroupGui", name)

        string_prop(thread_group, "ThreadGroup.on_sample_error", "continue")

        # Duration-based runs loop forever and let the scheduler stop them
        loops = "-1" if config.duration is not None else str(config.loop_count)
        loop_controller = element_prop(
            thread_group,
            "ThreadGroup.main_controller",
            "LoopController",
            guiclass="LoopControlPanel",
            testclass="LoopController",
            testname="Loop Controller",
            enabled="true",
        )
        bool_prop(loop_controller, "LoopController.continue_forever", False)
        string_prop(loop_controller, "LoopController.loops", loops)

        string_prop(thread_group, "ThreadGroup.num_threads", str(config.thread_count))
        string_prop(thread_group, "ThreadGroup.ramp_time", str(config.ramp_up))

        if config.duration is not None:
            bool_prop(thread_group, "ThreadGroup.scheduler", True)
            string_prop(thread_group, "ThreadGroup.duration", str(config.duration))
            string_prop(thread_group, "ThreadGroup.delay", "0")
        else:
            bool_prop(thread_group, "ThreadGroup.scheduler", False)
            string_prop(thread_group, "ThreadGroup.duration", "")
            string_prop(thread_group, "ThreadGroup.delay", "")

        bool_prop(thread_group, "ThreadGroup.same_user_on_next_iteration", True)

        return thread_group

    def _create_header_manager(
        self, headers: dict[str, str], name: str = "HTTP Header Manager"
    ) -> ET.Element:
        """Create HTTP Header Manager with multiple headers.

        Args:
            headers: Dictionary of header name -> value pairs
            name: Display name of the manager

        Returns:
            HeaderManager XML Element
        """
        header_manager = test_element("HeaderManager", "HeaderPanel", name)
        coll_prop = collection_prop(header_manager, "HeaderManager.headers")

        for header_name, header_value in headers.items():
            header = element_prop(coll_prop, "", "Header")
            string_prop(header, "Header.name", header_name)
            string_prop(header, "Header.value", header_value)

        return header_manager

    def _create_auth_elements(self, schemes: list[SecurityScheme]) -> list[ET.Element]:
        """Create header/auth managers for declared security schemes.

        Credentials are read from JMeter properties (-JBEARER_TOKEN=... etc.)
        so no secrets end up in the plan.
        """
        headers: dict[str, str] = {}
        basic_schemes = []

        for scheme in schemes:
            scheme_type = scheme.type.lower()
            if scheme_type == "apikey":
                if scheme.location == "header" and scheme.param_name:
                    property_name = f"API_KEY_{re.sub(r'[^A-Za-z0-9]+', '_', scheme.name).upper()}"
                    headers[scheme.param_name] = f"${{__P({property_name},)}}"
                else:
                    logger.debug("apiKey scheme '%s' in %s is not mapped", scheme.name, scheme.location)
            elif (scheme_type == "http" and scheme.scheme == "bearer") or scheme_type in (
                "oauth2",
                "openidconnect",
            ):
                headers["Authorization"] = "Bearer ${__P(BEARER_TOKEN,)}"
            elif (scheme_type == "http" and scheme.scheme == "basic") or scheme_type == "basic":
                basic_schemes.append(scheme.name)

        elements = []
        if headers:
            elements.append(self._create_header_manager(headers, "Authentication Headers"))
        for scheme_name in basic_schemes:
            elements.append(self._create_auth_manager(scheme_name))
        return elements

    def _create_auth_manager(self, scheme_name: str) -> ET.Element:
        auth_manager = test_element(
            "AuthManager", "AuthPanel", f"HTTP Authorization Manager - {scheme_name}"
        )
        auth_list = collection_prop(auth_manager, "AuthManager.auth_list")
        authorization = element_prop(auth_list, "", "Authorization")
        string_prop(authorization, "Authorization.url", "${protocol}://${domain}")
        string_prop(authorization, "Authorization.username", "${__P(BASIC_USERNAME,)}")
        string_prop(authorization, "Authorization.password", "${__P(BASIC_PASSWORD,)}")
        string_prop(authorization, "Authorization.domain", "")
        string_prop(authorization, "Authorization.realm", "")
        bool_prop(auth_manager, "AuthManager.controlledByThreadGroup", False)
        return auth_manager

    def _create_http_sampler(
        self,
        operation: Operation,
        path: str,
        connection: tuple[str, str, str],
        body: Optional[tuple[str, Any]],
        config: LoadConfig,
    ) -> ET.Element:
        """Create HTTP Sampler for a single operation.

        Args:
            operation: Operation to sample
            path: Assembled sampler path
            connection: Tuple of (domain, port, protocol) values
            body: Tuple of (content_type, value) or None
            config: Load configuration (timeouts, redirects, keep-alive)

        Returns:
            HTTPSamplerProxy XML Element
        """
        description = operation.summary or operation.label
        sampler = test_element(
            "HTTPSamplerProxy",
            "HttpTestSampleGui",
            f"[{operation.method}] {operation.path} → {description}",
        )

        query_params = operation.parameters_in("query")
        query_values = [(p.name, _parameter_value(p)) for p in query_params]

        form_fields = _form_fields(body)
        if form_fields is not None:
            bool_prop(sampler, "HTTPSampler.postBodyRaw", False)
            arguments = arguments_prop(sampler, "HTTPsampler.Arguments")
            for name, value in form_fields.items():
                add_http_argument(arguments, name, format_value(value), always_encode=True)
        elif body is not None:
            bool_prop(sampler, "HTTPSampler.postBodyRaw", True)
            arguments = arguments_prop(sampler, "HTTPsampler.Arguments", gui=False)
            add_http_argument(arguments, "", self._format_body(*body))
        else:
            arguments = arguments_prop(sampler, "HTTPsampler.Arguments")
            for name, value in query_values:
                add_http_argument(arguments, name, value)

        # Body arguments leave no room for query HTTPArguments, so query values go on the path
        if body is not None and query_values:
            path += "?" + "&".join(
                f"{name}={quote(value, safe='${}(),')}" for name, value in query_values
            )

        domain, port, protocol = connection
        string_prop(sampler, "HTTPSampler.domain", domain)
        string_prop(sampler, "HTTPSampler.port", port)
        string_prop(sampler, "HTTPSampler.protocol", protocol)
        string_prop(sampler, "HTTPSampler.contentEncoding", "")
        string_prop(sampler, "HTTPSampler.path", path)
        string_prop(sampler, "HTTPSampler.method", operation.method)
        bool_prop(sampler, "HTTPSampler.follow_redirects", config.follow_redirects)
        bool_prop(sampler, "HTTPSampler.auto_redirects", False)
        bool_prop(sampler, "HTTPSampler.use_keepalive", config.use_keep_alive)
        bool_prop(sampler, "HTTPSampler.DO_MULTIPART_POST", False)
        string_prop(sampler, "HTTPSampler.embedded_url_re", "")
        string_prop(sampler, "HTTPSampler.connect_timeout", str(config.connection_timeout))
        string_prop(sampler, "HTTPSampler.response_timeout", str(config.response_timeout))

        return sampler

    def _create_success_assertion(self) -> ET.Element:
        """Create the 2xx Response Assertion.

        Test type 33 is "Equals" combined with "Or", so any listed code passes.
        """
        assertion = test_element("ResponseAssertion", "AssertionGui", "HTTP Success Assertion")

        # JMeter's own spelling of the collection name
        test_strings = collection_prop(assertion, "Asserion.test_strings")
        for prop_name, code in SUCCESS_CODES:
            string_prop(test_strings, prop_name, code)

        string_prop(assertion, "Assertion.custom_message", "Expected successful HTTP status code (2xx)")
        string_prop(assertion, "Assertion.test_field", "Assertion.response_code")
        bool_prop(assertion, "Assertion.assume_success", False)
        int_prop(assertion, "Assertion.test_type", 33)

        return assertion

    def _create_duration_assertion(self, max_millis: int) -> ET.Element:
        assertion = test_element("DurationAssertion", "DurationAssertionGui", "Response Time Assertion")
        string_prop(assertion, "DurationAssertion.duration", str(max_millis))
        return assertion

    def _create_json_extractor(self, field_name: str) -> ET.Element:
        extractor = test_element("JSONPostProcessor", "JSONPostProcessorGui", f"Extract {field_name}")
        string_prop(extractor, "JSONPostProcessor.referenceNames", field_name)
        string_prop(extractor, "JSONPostProcessor.jsonPathExprs", f"$.{field_name}")
        string_prop(extractor, "JSONPostProcessor.match_numbers", "1")
        string_prop(extractor, "JSONPostProcessor.defaultValues", "NOT_FOUND")
        return extractor

    def _create_csv_data_set(self, config: LoadConfig) -> ET.Element:
        csv_data_set = test_element("CSVDataSet", "TestBeanGUI", "Test Data CSV Config")
        string_prop(csv_data_set, "delimiter", ",")
        string_prop(csv_data_set, "fileEncoding", "UTF-8")
        string_prop(csv_data_set, "filename", config.csv_file_name)
        bool_prop(csv_data_set, "ignoreFirstLine", True)
        bool_prop(csv_data_set, "quotedData", False)
        bool_prop(csv_data_set, "recycle", True)
        string_prop(csv_data_set, "shareMode", "shareMode.all")
        bool_prop(csv_data_set, "stopThread", False)
        string_prop(csv_data_set, "variableNames", config.csv_variable_names)
        return csv_data_set

    def _create_listener(self, guiclass: str, name: str) -> ET.Element:
        """Create a ResultCollector listener.

        Args:
            guiclass: Visualizer class (ViewResultsFullVisualizer, SummaryReport, StatVisualizer)
            name: Display name

        Returns:
            ResultCollector XML Element
        """
        listener = test_element("ResultCollector", guiclass, name)
        bool_prop(listener, "ResultCollector.error_logging", False)

        obj_prop = ET.SubElement(listener, "objProp")
        ET.SubElement(obj_prop, "name").text = "saveConfig"
        value_elem = ET.SubElement(obj_prop, "value", {"class": "SampleSaveConfiguration"})
        for key, val in SAVE_CONFIG.items():
            ET.SubElement(value_elem, key).text = val

        string_prop(listener, "filename", "")

        return listener
