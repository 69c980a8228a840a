import random
import string

import pytest

from boxrunner.errors import ConfigurationError
from boxrunner.MODELS.pipeline_config import PipelineConfig
from boxrunner.PARSERS.pipeline_parser import PipelineParser
from boxrunner.UTILS.environment import Environment
from boxrunner.UTILS.port_translation import port_bindings


def random_string(rng, alphabet, length):
    return ''.join(rng.choice(alphabet) for _ in range(length))


def test_fuzz_pipeline_parser():
    parser = PipelineParser()
    rng = random.Random(1337)
    for _ in range(200):
        content = random_string(rng, string.printable, rng.randint(0, 500))
        try:
            config = parser.parse_from_string(content)
        except ConfigurationError:
            continue
        assert isinstance(config, PipelineConfig)


def test_fuzz_pipeline_parser_yaml_shaped():
    parser = PipelineParser()
    rng = random.Random(42)
    fragments = ["box:", " ubuntu", "\n", "services:", "\n  - ", "id: ", "redis", "env:",
                 "\n    A: 1", "[", "]", "{", "}", "-", ":", "  ", "tag: 3", "null"]
    for _ in range(300):
        content = ''.join(rng.choice(fragments) for _ in range(rng.randint(0, 20)))
        try:
            config = parser.parse_from_string(content)
        except ConfigurationError:
            continue
        assert config.box.id


def test_fuzz_port_bindings():
    rng = random.Random(7)
    for _ in range(500):
        spec = random_string(rng, "0123456789:/.udptc", rng.randint(0, 20))
        try:
            bindings = port_bindings([spec])
        except ConfigurationError:
            assert spec.count(":") > 2
            continue
        for container_port, host_bindings in bindings.items():
            assert "/" in container_port
            assert len(host_bindings) == 1
            assert "/" not in host_bindings[0].host_port


def test_fuzz_interpolation():
    env = Environment([("A", "1"), ("B", "two")])
    rng = random.Random(99)
    for _ in range(300):
        template = random_string(rng, "AB${}:-+ x", rng.randint(0, 30))
        result = env.interpolate(template)
        assert isinstance(result, str)


@pytest.mark.parametrize("content", ["", "   \n\t  ", "---\n", "~"])
def test_edge_cases_pipeline_parser(content):
    with pytest.raises(ConfigurationError):
        PipelineParser().parse_from_string(content)
