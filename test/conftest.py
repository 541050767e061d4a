"""Shared fixtures for the basketminer tests."""

import os
import pytest
import basketminer
from basketminer.DataSet.Records import readLines, parseRecord


SAMPLE_BASKETS=["a,b,c","a,b","a,c","b,c","a,b,c"]


def writeBaskets(path,baskets):
    with open(path,"w",encoding="utf-8") as f:
        for basket in baskets:
            f.write(basket+"\n")
    return str(path)


def readRecords(path):
    "key -> value of every line of a job output directory"
    records={}
    for line in readLines(str(path)):
        key,value=parseRecord(line)
        records[key]=value
    return records


def readRuleLines(outputPath):
    with open(os.path.join(str(outputPath),basketminer.RulesDir,"part-r-00000"),encoding="utf-8") as f:
        return [line.rstrip("\n") for line in f if line.strip()]


@pytest.fixture
def sampleBaskets(tmp_path):
    """The five basket example: a:4 b:4 c:4 ab:3 ac:3 bc:3 abc:2."""
    return writeBaskets(tmp_path/"baskets.txt",SAMPLE_BASKETS)


@pytest.fixture
def outputDir(tmp_path):
    return str(tmp_path/"out")


@pytest.fixture
def config():
    return basketminer.defaultConfig(SUPPORT_THRESHOLD=2,
                                     CONFIDENCE_THRESHOLD=0.5,
                                     NUM_MAP_TASKS=2,
                                     NUM_REDUCERS=2,
                                     WHITELIST_BITS=1<<16)


@pytest.fixture
def helperDir(tmp_path):
    path=tmp_path/"helperfiles"
    path.mkdir()
    return str(path)
