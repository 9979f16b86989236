"""JMX file validator for generated load test plans.

This module checks JMeter JMX files for structural problems (missing
elements, unpaired hashTrees), thread group configuration errors and
incomplete samplers, and suggests improvements to the plan.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List

from loadplan_gen.exceptions import JMXValidationException

logger = logging.getLogger(__name__)

# Root variables that let samplers reference ${domain} instead of a literal host
CONNECTION_VARIABLES = ("domain", "port", "protocol")


class JMXValidator:
    """Validate JMeter JMX test plans.

    Works on plans produced by JMXGenerator as well as hand-made ones. Every
    thread group is checked, not only the first, and samplers may take their
    host from a literal domain, a ${domain} variable defined on the Test Plan,
    or HTTP Request Defaults.
    """

    def validate(self, jmx_path: str) -> Dict:
        """Validate JMX file structure and configuration.

        Args:
            jmx_path: Path to JMX file to validate

        Returns:
            Validation results containing:
            - valid: Whether the JMX file is valid
            - issues: List of problems found
            - recommendations: List of improvement suggestions

        Raises:
            FileNotFoundError: If JMX file doesn't exist
            JMXValidationException: If XML parsing fails
        """
        jmx_file = Path(jmx_path)
        if not jmx_file.exists():
            raise FileNotFoundError(f"JMX file not found: {jmx_path}")

        try:
            root = ET.parse(jmx_file).getroot()
        except ET.ParseError as e:
            raise JMXValidationException(f"Invalid XML in JMX file: {e}") from e

        return self.validate_tree(root)

    def validate_tree(self, root: ET.Element) -> Dict:
        """Validate an already parsed jmeterTestPlan element."""
        issues: List[str] = self._check_structure(root)
        if root.tag == "jmeterTestPlan":
            issues.extend(self._check_hash_trees(root))
            issues.extend(self._check_thread_groups(root))
            issues.extend(self._check_samplers(root))

        logger.debug("JMX validation found %d issues", len(issues))

        return {
            "valid": len(issues) == 0,
            "issues": issues,
            "recommendations": self._generate_recommendations(root),
        }

    def _check_structure(self, root: ET.Element) -> List[str]:
        issues: List[str] = []

        if root.tag != "jmeterTestPlan":
            issues.append("Root element must be 'jmeterTestPlan'")
            return issues

        if root.find("hashTree") is None:
            issues.append("Missing main hashTree element after jmeterTestPlan")
        if root.find(".//TestPlan") is None:
            issues.append("Missing TestPlan element")
        if root.find(".//ThreadGroup") is None:
            issues.append("Missing ThreadGroup element")

        return issues

    def _check_hash_trees(self, root: ET.Element) -> List[str]:
        """Check that every test element inside a hashTree is followed by its own hashTree."""
        issues: List[str] = []

        for tree in root.iter("hashTree"):
            children = list(tree)
            for index, child in enumerate(children):
                if child.tag == "hashTree":
                    continue
                following = children[index + 1] if index + 1 < len(children) else None
                if following is None or following.tag != "hashTree":
                    name = child.get("testname", child.tag)
                    issues.append(f"Element '{name}' is not followed by a hashTree")

        return issues

    def _check_thread_groups(self, root: ET.Element) -> List[str]:
        """Check configuration of every ThreadGroup.

        Args:
            root: Root XML element

        Returns:
            List of issues found (empty if valid)
        """
        issues: List[str] = []

        for thread_group in root.iter("ThreadGroup"):
            name = thread_group.get("testname", "ThreadGroup")

            num_threads_elem = thread_group.find(".//stringProp[@name='ThreadGroup.num_threads']")
            if num_threads_elem is None:
                issues.append(f"ThreadGroup '{name}' missing 'num_threads' configuration")
            else:
                try:
                    num_threads = int(num_threads_elem.text or "0")
                    if num_threads <= 0:
                        issues.append(f"ThreadGroup '{name}' 'num_threads' must be > 0 (found: {num_threads})")
                except ValueError:
                    issues.append(
                        f"ThreadGroup '{name}' 'num_threads' must be a valid number "
                        f"(found: '{num_threads_elem.text}')"
                    )

            if thread_group.find(".//stringProp[@name='ThreadGroup.ramp_time']") is None:
                issues.append(f"ThreadGroup '{name}' missing 'ramp_time' configuration")

            scheduler_elem = thread_group.find(".//boolProp[@name='ThreadGroup.scheduler']")
            duration_elem = thread_group.find(".//stringProp[@name='ThreadGroup.duration']")
            loops_elem = thread_group.find(".//stringProp[@name='LoopController.loops']")

            has_scheduler = scheduler_elem is not None and scheduler_elem.text == "true"
            if not (has_scheduler or loops_elem is not None):
                issues.append(
                    f"ThreadGroup '{name}' must have either scheduler enabled or loop count configured"
                )
            if has_scheduler and (duration_elem is None or not duration_elem.text):
                issues.append(f"ThreadGroup '{name}' has scheduler enabled but missing 'duration' configuration")

        return issues

    def _check_samplers(self, root: ET.Element) -> List[str]:
        issues: List[str] = []

        samplers = root.findall(".//HTTPSamplerProxy")
        if len(samplers) == 0:
            issues.append("No HTTP samplers found in test plan")
            return issues

        has_defaults = root.find(".//ConfigTestElement[@testclass='ConfigTestElement']") is not None
        variables = self._plan_variables(root)

        for idx, sampler in enumerate(samplers, 1):
            sampler_name = sampler.get("testname", f"Sampler #{idx}")

            path_elem = sampler.find("stringProp[@name='HTTPSampler.path']")
            if path_elem is None or not path_elem.text:
                issues.append(f"Sampler '{sampler_name}' missing path configuration")

            method_elem = sampler.find("stringProp[@name='HTTPSampler.method']")
            if method_elem is None or not method_elem.text:
                issues.append(f"Sampler '{sampler_name}' missing HTTP method")

            domain_elem = sampler.find("stringProp[@name='HTTPSampler.domain']")
            domain = domain_elem.text if domain_elem is not None else None
            if not domain:
                if not has_defaults:
                    issues.append(f"Sampler '{sampler_name}' has no domain and no HTTP Request Defaults found")
            elif domain.startswith("${") and domain.endswith("}"):
                variable = domain[2:-1]
                if not variable.startswith("__") and variable not in variables:
                    issues.append(f"Sampler '{sampler_name}' uses undefined variable '{domain}'")

        return issues

    def _plan_variables(self, root: ET.Element) -> Dict[str, str]:
        """Collect Test Plan user defined variables as name -> value."""
        variables: Dict[str, str] = {}
        for argument in root.findall(
            ".//TestPlan/elementProp[@name='TestPlan.user_defined_variables']"
            "/collectionProp/elementProp"
        ):
            name_elem = argument.find("stringProp[@name='Argument.name']")
            value_elem = argument.find("stringProp[@name='Argument.value']")
            if name_elem is None or not name_elem.text:
                continue
            variables[name_elem.text] = (value_elem.text or "") if value_elem is not None else ""
        return variables

    def _generate_recommendations(self, root: ET.Element) -> List[str]:
        """Generate improvement suggestions for the test plan.

        Args:
            root: Root XML element

        Returns:
            List of recommendations
        """
        recommendations: List[str] = []

        if root.find(".//CSVDataSet") is None:
            recommendations.append("Consider adding CSV Data Set Config for parameterized test data")

        if len(root.findall(".//ResultCollector")) == 0:
            recommendations.append("Consider adding listeners (View Results Tree, Summary Report) for result analysis")

        timers = root.findall(".//ConstantTimer") + root.findall(".//UniformRandomTimer")
        if len(timers) == 0:
            recommendations.append("Consider adding timers to simulate realistic user think time")

        assertions = root.findall(".//ResponseAssertion")
        if len(assertions) > 0 and root.find(".//DurationAssertion") is None:
            recommendations.append("Consider adding Duration Assertions for performance validation")

        variables = self._plan_variables(root)
        has_defaults = root.find(".//ConfigTestElement[@testclass='ConfigTestElement']") is not None
        if not has_defaults and not all(name in variables for name in CONNECTION_VARIABLES):
            recommendations.append(
                "Consider using HTTP Request Defaults or domain/port/protocol variables "
                "to centralize server configuration"
            )

        if root.find(".//HeaderManager") is None:
            recommendations.append("Consider adding Header Manager for Content-Type and other headers")

        for thread_group in root.iter("ThreadGroup"):
            num_threads_elem = thread_group.find(".//stringProp[@name='ThreadGroup.num_threads']")
            if num_threads_elem is None or not (num_threads_elem.text or "").isdigit():
                continue
            num_threads = int(num_threads_elem.text)
            if num_threads < 10:
                recommendations.append(
                    f"Thread count is low ({num_threads}) in '{thread_group.get('testname')}'. "
                    "Consider increasing for realistic load testing"
                )

        if root.find(".//HTTPSamplerProxy") is not None and len(assertions) == 0:
            recommendations.append("No assertions found. Consider adding assertions to validate responses")

        return recommendations
