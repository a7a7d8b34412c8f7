[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cfddns"
version = "0.1.0"
description = "Update logic for a dynamic DNS client: detect IP addresses, update DNS records and WAF lists, and summarise the outcome"
requires-python = ">=3.10"
dependencies = []
keywords = ["ddns", "dns", "dynamic-dns", "waf", "ip-address"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: Name Service (DNS)",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["cfddns"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
