"""Tests for JMX Generator module."""

import json
import logging
import xml.etree.ElementTree as ET
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Optional

import pytest

from loadplan_gen.core.data_structures import MediaType, Operation, Parameter, ParsedSpec, RequestBody
from loadplan_gen.core.har_parser import HARParser
from loadplan_gen.core.jmx_generator import (
    DEFAULT_CORRELATION_FIELDS,
    JMXGenerator,
    build_sampler_path,
    convert_path_parameters,
    group_operations,
    thread_group_name,
)
from loadplan_gen.core.jmx_validator import JMXValidator
from loadplan_gen.core.load_config import GROUP_BY_PATH, LoadConfig
from loadplan_gen.core.openapi_parser import OpenAPIParser
from loadplan_gen.exceptions import PlanGenerationException


def _string_prop(elem: ET.Element, name: str) -> Optional[str]:
    prop = elem.find(f"stringProp[@name='{name}']")
    return prop.text if prop is not None else None


def _samplers(root: ET.Element) -> list[ET.Element]:
    return root.findall(".//HTTPSamplerProxy")


def _children_after(parent: ET.Element, element: ET.Element) -> ET.Element:
    """Return the hashTree paired with an element."""
    children = list(parent)
    return children[children.index(element) + 1]


class TestPathHelpers:
    """Test suite for path and grouping helpers."""

    def test_convert_path_parameters(self) -> None:
        """Test that every placeholder is rewritten."""
        assert convert_path_parameters("/a/{x}/b/{y}") == "/a/${x}/b/${y}"

    @pytest.mark.parametrize(
        "operation_path,url_path,base_path,expected",
        [
            ("/users", "", "", "/users"),
            ("/users/{id}", "/api", "", "/api/users/${id}"),
            ("/users", "/api/", "/v1", "/api/v1/users"),
            ("/users", "/v1", "/v1", "/v1/users"),
            ("/users", "", "/", "/users"),
            ("//double//slash/", "", "", "/double/slash"),
        ],
    )
    def test_build_sampler_path(self, operation_path: str, url_path: str, base_path: str, expected: str) -> None:
        """Test path assembly and segment collapsing."""
        assert build_sampler_path(operation_path, url_path, base_path) == expected

    def test_group_by_tag(self) -> None:
        """Test first-tag grouping with the default bucket."""
        operations = [
            Operation(path="/a", method="GET", tags=["users", "admin"]),
            Operation(path="/b", method="GET"),
            Operation(path="/c", method="GET", tags=["users"]),
        ]

        groups = group_operations(operations, "tag")

        assert list(groups) == ["users", "default"]
        assert len(groups["users"]) == 2

    def test_group_by_path(self) -> None:
        """Test first-segment grouping with the root bucket."""
        operations = [
            Operation(path="/orders/{id}", method="GET"),
            Operation(path="/", method="GET"),
            Operation(path="/orders", method="POST"),
        ]

        groups = group_operations(operations, GROUP_BY_PATH)

        assert list(groups) == ["orders", "root"]

    def test_thread_group_name(self) -> None:
        """Test capitalization of the bucket name."""
        assert thread_group_name("pets") == "Pets APIs"
        assert thread_group_name("default") == "Default APIs"


class TestJMXGenerator:
    """Test suite for JMXGenerator class."""

    @pytest.fixture
    def generator(self, frozen_clock: Callable[[], datetime]) -> JMXGenerator:
        """Create a JMXGenerator with a frozen clock.

        Returns:
            JMXGenerator instance
        """
        return JMXGenerator(clock=frozen_clock)

    @pytest.fixture
    def petstore(self, petstore_spec_path: Path) -> ParsedSpec:
        """Parsed pet store spec (two tags, bearer and apiKey security)."""
        return OpenAPIParser().parse(str(petstore_spec_path))

    @pytest.fixture
    def untagged(self) -> ParsedSpec:
        """Three operations without tags or base URL."""
        return ParsedSpec(
            title="Untagged",
            version="1",
            spec_type="openapi",
            operations=[
                Operation(path="/health", method="GET"),
                Operation(path="/items/{id}", method="GET", summary="Get item"),
                Operation(
                    path="/search",
                    method="POST",
                    parameters=[Parameter(name="q", location="query")],
                    request_body=RequestBody(
                        content={"application/json": MediaType(example={"term": "x"})}
                    ),
                ),
            ],
        )

    def _parse(self, xml: str) -> ET.Element:
        return ET.fromstring(xml.encode("utf-8"))

    def test_document_header(self, generator: JMXGenerator, untagged: ParsedSpec) -> None:
        """Test XML declaration and root attributes."""
        xml = generator.build_document(untagged)

        assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>\n<jmeterTestPlan')
        root = self._parse(xml)
        assert root.attrib == {"version": "1.2", "properties": "5.0", "jmeter": "5.5"}

    def test_untagged_operations_share_default_group(self, generator: JMXGenerator, untagged: ParsedSpec) -> None:
        """Test that N untagged operations give one group with N sampler+hashTree pairs."""
        root = self._parse(generator.build_document(untagged))

        thread_groups = root.findall(".//ThreadGroup")
        assert [tg.get("testname") for tg in thread_groups] == ["Default APIs"]

        tg_tree = _children_after(root.find("hashTree/hashTree"), thread_groups[0])
        samplers = tg_tree.findall("HTTPSamplerProxy")
        assert len(samplers) == 3
        for sampler in samplers:
            assert _children_after(tg_tree, sampler).tag == "hashTree"

    def test_identical_output_with_frozen_clock(
        self, frozen_clock: Callable[[], datetime], petstore: ParsedSpec
    ) -> None:
        """Test byte-identical output for the same input, config and clock."""
        config = LoadConfig(add_correlation=True, enable_reporting=True)

        first = JMXGenerator(clock=frozen_clock).build_document(petstore, config)
        second = JMXGenerator(clock=frozen_clock).build_document(petstore, config)

        assert first == second

    def test_test_plan_variables(self, generator: JMXGenerator, petstore: ParsedSpec) -> None:
        """Test domain/port/protocol user defined variables."""
        root = self._parse(generator.build_document(petstore))
        test_plan = root.find("hashTree/TestPlan")

        arguments = test_plan.findall(
            "elementProp[@name='TestPlan.user_defined_variables']/collectionProp/elementProp"
        )
        values = {_string_prop(a, "Argument.name"): _string_prop(a, "Argument.value") for a in arguments}
        assert values == {"domain": "api.petstore.io", "port": "8443", "protocol": "https"}
        assert _string_prop(test_plan, "TestPlan.comments") == (
            "Generated from OpenAPI/Swagger specification - Grouped by Tags"
        )
        assert test_plan.get("testname") == "API Performance Test"

    def test_thread_groups_per_tag(self, generator: JMXGenerator, petstore: ParsedSpec) -> None:
        """Test one thread group per first tag in first-seen order."""
        root = self._parse(generator.build_document(petstore))

        names = [tg.get("testname") for tg in root.findall(".//ThreadGroup")]
        assert names == ["Pets APIs", "Store APIs"]

    def test_thread_group_loop_settings(self, generator: JMXGenerator, untagged: ParsedSpec) -> None:
        """Test loop-based thread group configuration."""
        config = LoadConfig(thread_count=5, ramp_up=3, loop_count=4)
        thread_group = self._parse(generator.build_document(untagged, config)).find(".//ThreadGroup")

        assert _string_prop(thread_group, "ThreadGroup.num_threads") == "5"
        assert _string_prop(thread_group, "ThreadGroup.ramp_time") == "3"
        assert _string_prop(thread_group, "ThreadGroup.on_sample_error") == "continue"
        assert thread_group.find(".//stringProp[@name='LoopController.loops']").text == "4"
        assert thread_group.find("boolProp[@name='ThreadGroup.scheduler']").text == "false"
        assert thread_group.find("boolProp[@name='ThreadGroup.same_user_on_next_iteration']").text == "true"

    def test_thread_group_duration_settings(self, generator: JMXGenerator, untagged: ParsedSpec) -> None:
        """Test that a duration enables the scheduler and infinite loops."""
        thread_group = self._parse(
            generator.build_document(untagged, LoadConfig(duration=60))
        ).find(".//ThreadGroup")

        assert thread_group.find(".//stringProp[@name='LoopController.loops']").text == "-1"
        assert thread_group.find("boolProp[@name='ThreadGroup.scheduler']").text == "true"
        assert _string_prop(thread_group, "ThreadGroup.duration") == "60"

    def test_shared_header_manager_first(self, generator: JMXGenerator, untagged: ParsedSpec) -> None:
        """Test the JSON header manager is the first child of each thread group."""
        root = self._parse(generator.build_document(untagged))
        tg_tree = root.find("hashTree/hashTree/hashTree")

        header_manager = list(tg_tree)[0]
        assert header_manager.tag == "HeaderManager"
        headers = {
            _string_prop(h, "Header.name"): _string_prop(h, "Header.value")
            for h in header_manager.findall("collectionProp/elementProp")
        }
        assert headers == {"Content-Type": "application/json", "Accept": "application/json"}

    def test_sampler_names_and_connection(self, generator: JMXGenerator, petstore: ParsedSpec) -> None:
        """Test sampler testname format and variable-based connection settings."""
        samplers = _samplers(self._parse(generator.build_document(petstore)))

        assert samplers[0].get("testname") == "[GET] /pets → List pets"
        assert samplers[3].get("testname") == "[DELETE] /pets/{petId} → DELETE /pets/{petId}"
        assert _string_prop(samplers[0], "HTTPSampler.domain") == "${domain}"
        assert _string_prop(samplers[0], "HTTPSampler.port") == "${port}"
        assert _string_prop(samplers[0], "HTTPSampler.protocol") == "${protocol}"

    def test_sampler_paths(self, generator: JMXGenerator, petstore: ParsedSpec) -> None:
        """Test that the base URL path prefixes each operation path."""
        samplers = _samplers(self._parse(generator.build_document(petstore)))

        assert [_string_prop(s, "HTTPSampler.path") for s in samplers] == [
            "/v1/pets",
            "/v1/pets",
            "/v1/pets/${petId}",
            "/v1/pets/${petId}",
            "/v1/stores/${storeId}/orders",
        ]

    def test_base_url_override(self, generator: JMXGenerator, petstore: ParsedSpec) -> None:
        """Test that an explicit base URL replaces the spec's."""
        root = self._parse(generator.build_document(petstore, base_url="http://staging:8080"))

        test_plan = root.find("hashTree/TestPlan")
        assert "staging" in ET.tostring(test_plan, encoding="unicode")
        assert _string_prop(_samplers(root)[0], "HTTPSampler.path") == "/pets"

    def test_query_parameters_as_arguments(self, generator: JMXGenerator, petstore: ParsedSpec) -> None:
        """Test that query parameters become HTTP arguments with defaults."""
        list_pets = _samplers(self._parse(generator.build_document(petstore)))[0]

        arguments = list_pets.findall("elementProp[@name='HTTPsampler.Arguments']/collectionProp/elementProp")
        assert [(a.get("name"), _string_prop(a, "Argument.value")) for a in arguments] == [("limit", "20")]

    def test_generated_body_from_ref(self, generator: JMXGenerator, petstore: ParsedSpec) -> None:
        """Test raw body generated from a referenced schema."""
        create_pet = _samplers(self._parse(generator.build_document(petstore)))[1]

        assert create_pet.find("boolProp[@name='HTTPSampler.postBodyRaw']").text == "true"
        body = create_pet.find(".//elementProp[@elementType='HTTPArgument']/stringProp[@name='Argument.value']")
        assert json.loads(body.text) == {"name": "sample_string", "age": 0, "email": "user@example.com"}

    def test_example_body_and_header_parameters(self, generator: JMXGenerator, petstore: ParsedSpec) -> None:
        """Test media example body and the sampler-level header manager."""
        root = self._parse(generator.build_document(petstore))
        place_order = _samplers(root)[4]

        body = place_order.find(".//stringProp[@name='Argument.value']")
        assert json.loads(body.text) == {"petId": 7, "quantity": 2}
        assert body.text == json.dumps({"petId": 7, "quantity": 2}, indent=2)

        store_tree = root.find("hashTree/hashTree").findall("hashTree")[1]
        sampler_tree = _children_after(store_tree, place_order)
        request_headers = sampler_tree.find("HeaderManager")
        assert request_headers.get("testname") == "Request Headers"
        assert _string_prop(request_headers.find("collectionProp/elementProp"), "Header.name") == "X-Request-Id"
        assert _string_prop(request_headers.find("collectionProp/elementProp"), "Header.value") == "req-1"

    def test_fallback_body_for_delete(self, generator: JMXGenerator, petstore: ParsedSpec) -> None:
        """Test the generic body used when a mutating operation declares none."""
        delete_pet = _samplers(self._parse(generator.build_document(petstore)))[3]

        body = delete_pet.find(".//stringProp[@name='Argument.value']")
        assert json.loads(body.text) == {
            "id": 1,
            "name": "Sample Name",
            "description": "Sample Description",
            "status": "active",
            "timestamp": "2024-01-02T03:04:05.000Z",
        }

    def test_get_has_no_body(self, generator: JMXGenerator, untagged: ParsedSpec) -> None:
        """Test that GET samplers do not send a raw body."""
        health = _samplers(self._parse(generator.build_document(untagged)))[0]

        assert health.find("boolProp[@name='HTTPSampler.postBodyRaw']") is None

    def test_query_moves_to_path_with_body(self, generator: JMXGenerator, untagged: ParsedSpec) -> None:
        """Test that query parameters are appended to the path when a raw body is sent."""
        search = _samplers(self._parse(generator.build_document(untagged)))[2]

        assert _string_prop(search, "HTTPSampler.path") == "/search?q=${q}"

    def test_success_assertion(self, generator: JMXGenerator, untagged: ParsedSpec) -> None:
        """Test the 2xx response code assertion."""
        root = self._parse(generator.build_document(untagged))
        assertions = root.findall(".//ResponseAssertion")

        assert len(assertions) == 3
        assertion = assertions[0]
        assert assertion.get("testname") == "HTTP Success Assertion"
        test_strings = assertion.findall("collectionProp[@name='Asserion.test_strings']/stringProp")
        codes = [(p.get("name"), p.text) for p in test_strings]
        assert codes == [("49586", "200"), ("49587", "201"), ("49588", "202"), ("49589", "204")]
        assert assertion.find("intProp[@name='Assertion.test_type']").text == "33"
        assert _string_prop(assertion, "Assertion.test_field") == "Assertion.response_code"

    def test_no_assertions(self, generator: JMXGenerator, untagged: ParsedSpec) -> None:
        """Test that assertions can be switched off."""
        root = self._parse(generator.build_document(untagged, LoadConfig(add_assertions=False)))

        assert root.findall(".//ResponseAssertion") == []

    def test_duration_assertion_and_threshold_comments(self, generator: JMXGenerator, untagged: ParsedSpec) -> None:
        """Test response time threshold handling."""
        config = LoadConfig(response_time_threshold=500, error_rate_threshold=1.5)
        root = self._parse(generator.build_document(untagged, config))

        durations = root.findall(".//DurationAssertion")
        assert len(durations) == 3
        assert _string_prop(durations[0], "DurationAssertion.duration") == "500"
        comments = _string_prop(root.find("hashTree/TestPlan"), "TestPlan.comments")
        assert "response time 500 ms" in comments
        assert "error rate 1.5%" in comments

    def test_auth_elements(self, generator: JMXGenerator, petstore: ParsedSpec) -> None:
        """Test bearer and apiKey header mapping."""
        root = self._parse(generator.build_document(petstore))

        auth_headers = root.findall(".//HeaderManager[@testname='Authentication Headers']")
        assert len(auth_headers) == 2  # one per thread group
        headers = {
            _string_prop(h, "Header.name"): _string_prop(h, "Header.value")
            for h in auth_headers[0].findall("collectionProp/elementProp")
        }
        assert headers == {
            "Authorization": "Bearer ${__P(BEARER_TOKEN,)}",
            "X-API-Key": "${__P(API_KEY_APIKEY,)}",
        }

    def test_basic_auth_manager(self, generator: JMXGenerator, swagger_spec: dict) -> None:
        """Test that basic auth becomes an AuthManager."""
        parsed = OpenAPIParser().parse_document(swagger_spec)
        root = self._parse(generator.build_document(parsed))

        auth_manager = root.find(".//AuthManager")
        assert auth_manager.get("testname") == "HTTP Authorization Manager - basicAuth"
        authorization = auth_manager.find("collectionProp/elementProp")
        assert _string_prop(authorization, "Authorization.url") == "${protocol}://${domain}"
        assert _string_prop(authorization, "Authorization.username") == "${__P(BASIC_USERNAME,)}"

    def test_auth_disabled(self, generator: JMXGenerator, petstore: ParsedSpec) -> None:
        """Test add_auth=False."""
        root = self._parse(generator.build_document(petstore, LoadConfig(add_auth=False)))

        assert root.find(".//HeaderManager[@testname='Authentication Headers']") is None

    def test_swagger_base_path_not_duplicated(self, generator: JMXGenerator, swagger_spec: dict) -> None:
        """Test that basePath already in the base URL is not added twice."""
        parsed = OpenAPIParser().parse_document(swagger_spec)
        samplers = _samplers(self._parse(generator.build_document(parsed)))

        assert _string_prop(samplers[0], "HTTPSampler.path") == "/v1/users/${id}"

    def test_form_data_sent_as_encoded_arguments(self, generator: JMXGenerator, swagger_spec: dict) -> None:
        """Test that a url-encoded form body is sent as name/value arguments, not JSON."""
        parsed = OpenAPIParser().parse_document(swagger_spec)
        root = self._parse(generator.build_document(parsed))
        login = next(s for s in _samplers(root) if "/login" in s.get("testname"))

        assert login.find("boolProp[@name='HTTPSampler.postBodyRaw']").text == "false"
        arguments = login.findall(".//elementProp[@elementType='HTTPArgument']")
        assert [(a.get("name"), _string_prop(a, "Argument.value")) for a in arguments] == [
            ("username", "sample_string"),
            ("password", "sample_string"),
        ]
        assert all(a.find("boolProp[@name='HTTPArgument.always_encode']").text == "true" for a in arguments)

    def test_invalid_xml_characters_removed(self, generator: JMXGenerator) -> None:
        """Test that control characters from the document do not break serialization."""
        parsed = ParsedSpec(
            title="Control",
            version="1",
            spec_type="openapi",
            operations=[
                Operation(
                    path="/items",
                    method="GET",
                    summary="List\u000bitems",
                    parameters=[Parameter(name="filter", location="query", example="a\u0001b\tc")],
                )
            ],
        )

        root = self._parse(generator.build_document(parsed))
        sampler = _samplers(root)[0]

        assert sampler.get("testname") == "[GET] /items → Listitems"
        argument = sampler.find(".//elementProp[@elementType='HTTPArgument']")
        assert _string_prop(argument, "Argument.value") == "ab\tc"

    def test_query_values_formatted_as_json(self, generator: JMXGenerator) -> None:
        """Test boolean and array examples are written the way JSON writes them."""
        parsed = ParsedSpec(
            title="Flags",
            version="1",
            spec_type="openapi",
            operations=[
                Operation(
                    path="/users",
                    method="GET",
                    parameters=[
                        Parameter(name="active", location="query", example=True),
                        Parameter(name="ids", location="query", example=["a", "b"]),
                        Parameter(name="page", location="query", default=2),
                    ],
                )
            ],
        )

        sampler = _samplers(self._parse(generator.build_document(parsed)))[0]
        arguments = sampler.findall(".//elementProp[@elementType='HTTPArgument']")

        assert [_string_prop(a, "Argument.value") for a in arguments] == ["true", '["a", "b"]', "2"]

    def test_missing_base_url_warned_once(
        self, generator: JMXGenerator, untagged: ParsedSpec, temp_project_dir: Path, caplog
    ) -> None:
        """Test that generate() resolves the base URL a single time."""
        with caplog.at_level(logging.WARNING, logger="loadplan_gen.core.jmx_generator"):
            result = generator.generate(untagged, str(temp_project_dir / "plan.jmx"))

        warnings = [r for r in caplog.records if "No base URL" in r.getMessage()]
        assert len(warnings) == 1
        assert result["base_url"] == ""

    def test_correlation_extractors(self, generator: JMXGenerator, petstore: ParsedSpec) -> None:
        """Test id-like fields from the response schema and the default fallback."""
        root = self._parse(generator.build_document(petstore, LoadConfig(add_correlation=True)))
        test_plan_tree = root.find("hashTree/hashTree")
        pets_tree = test_plan_tree.findall("hashTree")[0]
        samplers = pets_tree.findall("HTTPSamplerProxy")

        create_tree = _children_after(pets_tree, samplers[1])
        names = [e.get("testname") for e in create_tree.findall("JSONPostProcessor")]
        assert names == ["Extract id", "Extract ownerId"]
        extractor = create_tree.find("JSONPostProcessor")
        assert _string_prop(extractor, "JSONPostProcessor.jsonPathExprs") == "$.id"
        assert _string_prop(extractor, "JSONPostProcessor.defaultValues") == "NOT_FOUND"

        list_tree = _children_after(pets_tree, samplers[0])
        fallback = [_string_prop(e, "JSONPostProcessor.referenceNames") for e in list_tree.findall("JSONPostProcessor")]
        assert fallback == DEFAULT_CORRELATION_FIELDS

    def test_csv_config_and_reporting(self, generator: JMXGenerator, untagged: ParsedSpec) -> None:
        """Test optional CSV Data Set and report listeners."""
        config = LoadConfig(generate_csv_config=True, enable_reporting=True, csv_file_name="users.csv")
        root = self._parse(generator.build_document(untagged, config))

        csv_data_set = root.find(".//CSVDataSet")
        assert _string_prop(csv_data_set, "filename") == "users.csv"
        assert _string_prop(csv_data_set, "shareMode") == "shareMode.all"

        listeners = [r.get("guiclass") for r in root.findall(".//ResultCollector")]
        assert listeners == ["SummaryReport", "StatVisualizer", "ViewResultsFullVisualizer"]

    def test_view_results_tree_is_last(self, generator: JMXGenerator, untagged: ParsedSpec) -> None:
        """Test the trailing results collector."""
        test_plan_tree = self._parse(generator.build_document(untagged)).find("hashTree/hashTree")

        children = list(test_plan_tree)
        assert children[-2].tag == "ResultCollector"
        assert children[-2].get("testname") == "View Results Tree"
        assert children[-1].tag == "hashTree"

    def test_missing_base_url_falls_back_to_localhost(self, generator: JMXGenerator, untagged: ParsedSpec) -> None:
        """Test the https://localhost fallback."""
        test_plan = self._parse(generator.build_document(untagged)).find("hashTree/TestPlan")

        text = ET.tostring(test_plan, encoding="unicode")
        assert ">localhost<" in text
        assert ">443<" in text

    def test_zero_operations_raise(self, generator: JMXGenerator) -> None:
        """Test PlanGenerationException for an empty spec."""
        empty = ParsedSpec(title="Empty", version="1", spec_type="openapi")

        with pytest.raises(PlanGenerationException):
            generator.build_document(empty)

    def test_operation_filter(self, generator: JMXGenerator, petstore: ParsedSpec) -> None:
        """Test filtering by operationId."""
        root = self._parse(generator.build_document(petstore, operation_ids=["getPet", "placeOrder"]))

        assert len(_samplers(root)) == 2

        with pytest.raises(PlanGenerationException) as exc_info:
            generator.build_document(petstore, operation_ids=["unknown"])
        assert "listPets" in str(exc_info.value)

    def test_generate_writes_file(
        self, generator: JMXGenerator, petstore: ParsedSpec, temp_project_dir: Path
    ) -> None:
        """Test generate() output file and result dictionary."""
        output = temp_project_dir / "nested" / "plan.jmx"

        result = generator.generate(petstore, str(output), LoadConfig(add_correlation=True))

        assert result["success"] is True
        assert Path(result["jmx_path"]).exists()
        assert result["thread_groups"] == 2
        assert result["samplers_created"] == 5
        assert result["assertions_added"] == 5
        assert result["extractors_added"] > 0
        assert "5 HTTP samplers" in result["summary"]

    def test_generated_plan_validates(
        self, generator: JMXGenerator, petstore: ParsedSpec, temp_project_dir: Path
    ) -> None:
        """Test that a generated plan passes the validator."""
        output = temp_project_dir / "plan.jmx"
        generator.generate(petstore, str(output), LoadConfig(add_correlation=True, generate_csv_config=True))

        result = JMXValidator().validate(str(output))

        assert result["valid"] is True, result["issues"]

    def test_write_failure_wrapped(self, generator: JMXGenerator, petstore: ParsedSpec, temp_project_dir: Path) -> None:
        """Test that OS errors surface as PlanGenerationException."""
        blocker = temp_project_dir / "file"
        blocker.write_text("x", encoding="utf-8")

        with pytest.raises(PlanGenerationException):
            generator.generate(petstore, str(blocker / "plan.jmx"))


class TestHarPlans:
    """Test suite for plans generated from HAR captures."""

    @pytest.fixture
    def generator(self, frozen_clock: Callable[[], datetime]) -> JMXGenerator:
        """Create a JMXGenerator with a frozen clock."""
        return JMXGenerator(clock=frozen_clock)

    def test_one_thread_group_per_host(self, generator: JMXGenerator, har_document: dict) -> None:
        """Test host-tag grouping."""
        parsed = HARParser().parse_document(har_document)
        root = ET.fromstring(generator.build_document(parsed).encode("utf-8"))

        names = [tg.get("testname") for tg in root.findall(".//ThreadGroup")]
        assert names == ["Shop.example.com APIs", "Cdn.example.net APIs"]
        comments = _string_prop(root.find("hashTree/TestPlan"), "TestPlan.comments")
        assert comments.startswith("Generated from HAR capture")

    def test_foreign_host_uses_literal_connection(self, generator: JMXGenerator, har_document: dict) -> None:
        """Test that requests on another origin do not use ${domain}."""
        parsed = HARParser().parse_document(har_document)
        samplers = _samplers(ET.fromstring(generator.build_document(parsed).encode("utf-8")))

        assert _string_prop(samplers[0], "HTTPSampler.domain") == "${domain}"
        assert _string_prop(samplers[2], "HTTPSampler.domain") == "cdn.example.net"
        assert _string_prop(samplers[2], "HTTPSampler.port") == "443"
        assert _string_prop(samplers[2], "HTTPSampler.path") == "/api/config"

    def test_recorded_values(self, generator: JMXGenerator, har_document: dict) -> None:
        """Test recorded query values and body."""
        parsed = HARParser().parse_document(har_document)
        samplers = _samplers(ET.fromstring(generator.build_document(parsed).encode("utf-8")))

        arguments = samplers[0].findall("elementProp/collectionProp/elementProp")
        assert [(a.get("name"), _string_prop(a, "Argument.value")) for a in arguments] == [
            ("page", "2"),
            ("sort", "name"),
        ]
        body = samplers[1].find(".//stringProp[@name='Argument.value']")
        assert json.loads(body.text) == {"productId": 5, "qty": 1}

    def test_raw_form_body_and_content_type(self, generator: JMXGenerator) -> None:
        """Test non-JSON bodies are sent verbatim with their content type."""
        har = {
            "log": {
                "entries": [
                    {
                        "request": {
                            "method": "POST",
                            "url": "http://h/form",
                            "postData": {"mimeType": "application/x-www-form-urlencoded", "text": "a=1&b=2"},
                        }
                    },
                    {"request": {"method": "DELETE", "url": "http://h/form/1"}},
                ]
            }
        }
        parsed = HARParser().parse_document(har)
        root = ET.fromstring(generator.build_document(parsed).encode("utf-8"))
        samplers = _samplers(root)

        assert samplers[0].find(".//stringProp[@name='Argument.value']").text == "a=1&b=2"
        headers = root.find(".//HeaderManager[@testname='Request Headers']")
        assert _string_prop(headers.find("collectionProp/elementProp"), "Header.value") == (
            "application/x-www-form-urlencoded"
        )
        # Recorded requests without a body stay bodiless
        assert samplers[1].find("boolProp[@name='HTTPSampler.postBodyRaw']") is None

    def test_blank_recorded_query_value_kept(self, generator: JMXGenerator) -> None:
        """Test that an empty recorded value is not replaced by a variable."""
        har = {"log": {"entries": [{"request": {"method": "GET", "url": "http://h/search?q=&page=1"}}]}}
        parsed = HARParser().parse_document(har)
        root = ET.fromstring(generator.build_document(parsed).encode("utf-8"))

        arguments = _samplers(root)[0].findall(".//elementProp[@elementType='HTTPArgument']")
        assert [(a.get("name"), _string_prop(a, "Argument.value") or "") for a in arguments] == [
            ("q", ""),
            ("page", "1"),
        ]
