import os
import json
import logging
import pytest
import basketminer
from basketminer.Configuration import buildConfig, validateConfig
from basketminer.Exceptions import ConfigurationError
from basketminer.mineRules import main, parseBool
from conftest import readRuleLines


def test_cli_runs_extraction(sampleBaskets,outputDir):
    assert main([sampleBaskets,outputDir,"2","0.5","--num_reducers","3"])==0
    rules=readRuleLines(outputDir)
    assert len(rules)==12
    assert rules[0].endswith("\t0.75")

    with open(os.path.join(outputDir,basketminer.HelperFilesDir,"config.json")) as f:
        saved=json.load(f)
    assert saved["SUPPORT_THRESHOLD"]==2
    assert saved["NUM_REDUCERS"]==3


def test_cli_unparseable_thresholds_fall_back_to_defaults(sampleBaskets,outputDir,caplog):
    with caplog.at_level(logging.WARNING):
        assert main([sampleBaskets,outputDir,"lots","high"])==0

    assert "problem converting support threshold" in caplog.text
    assert "problem converting confidence threshold" in caplog.text
    with open(os.path.join(outputDir,basketminer.HelperFilesDir,"config.json")) as f:
        saved=json.load(f)
    assert saved["SUPPORT_THRESHOLD"]==basketminer.SupportThreshold
    assert saved["CONFIDENCE_THRESHOLD"]==basketminer.ConfidenceThreshold
    # nothing reaches the default support of 100 in five baskets
    assert readRuleLines(outputDir)==[]


def test_cli_out_of_range_confidence_falls_back(sampleBaskets,outputDir,caplog):
    with caplog.at_level(logging.WARNING):
        assert main([sampleBaskets,outputDir,"2","1.5"])==0
    assert "confidence threshold must be in [0,1]" in caplog.text


def test_cli_unparseable_options_fall_back_to_defaults(sampleBaskets,outputDir,caplog):
    with caplog.at_level(logging.WARNING):
        assert main([sampleBaskets,outputDir,"2","0.5","--num_reducers","three","--max_k","2.5"])==0

    assert "problem converting --num_reducers='three'" in caplog.text
    assert "problem converting --max_k='2.5'" in caplog.text
    with open(os.path.join(outputDir,basketminer.HelperFilesDir,"config.json")) as f:
        saved=json.load(f)
    assert saved["NUM_REDUCERS"]==basketminer.DEFAULTS["NUM_REDUCERS"]
    assert saved["MAX_TUPEL_SIZE"]==basketminer.DEFAULTS["MAX_TUPEL_SIZE"]
    assert len(readRuleLines(outputDir))==12


def test_cli_keep_helper_files_flag(sampleBaskets,outputDir):
    assert main([sampleBaskets,outputDir,"2","0.5","false"])==0
    helper=os.path.join(outputDir,basketminer.HelperFilesDir)
    assert not os.path.exists(os.path.join(helper,"item-keyMap.json"))
    assert os.path.exists(os.path.join(helper,"mappingKeysToItems.txt"))


def test_cli_missing_input_exits_nonzero(tmp_path,outputDir,caplog):
    with caplog.at_level(logging.ERROR):
        assert main([str(tmp_path/"nope.txt"),outputDir,"2","0.5"])==1
    assert "extraction failed" in caplog.text


def test_cli_unwritable_output_exits_nonzero(sampleBaskets,tmp_path,caplog):
    blocker=tmp_path/"results.txt"
    blocker.write_text("a file, not a directory\n")

    with caplog.at_level(logging.ERROR):
        assert main([sampleBaskets,str(blocker/"out"),"2","0.5"])==1
    assert "failed writing configuration" in caplog.text


def test_cli_config_file(sampleBaskets,outputDir,tmp_path):
    configFile=str(tmp_path/"config.json")
    basketminer.saveConfig(configFile,{"SUPPORT_THRESHOLD":2,"CONFIDENCE_THRESHOLD":0.7})
    assert main([sampleBaskets,outputDir,"--config",configFile])==0
    assert len(readRuleLines(outputDir))==6


def test_cli_invalid_config_file(sampleBaskets,outputDir,tmp_path):
    configFile=str(tmp_path/"config.json")
    basketminer.saveConfig(configFile,{"NUM_REDUCERS":0})
    assert main([sampleBaskets,outputDir,"--config",configFile])==2


def test_parse_bool():
    assert parseBool("True") is True
    assert parseBool("no") is False
    with pytest.raises(ValueError):
        parseBool("maybe")


def test_build_config_layers(tmp_path,caplog):
    configFile=str(tmp_path/"config.json")
    basketminer.saveConfig(configFile,{"SUPPORT_THRESHOLD":"7","UNKNOWN_KEY":1})

    with caplog.at_level(logging.WARNING):
        config=buildConfig(configFile,SUPPORT_THRESHOLD=None,NUM_REDUCERS=5)

    assert config["SUPPORT_THRESHOLD"]==7
    assert config["NUM_REDUCERS"]==5
    assert "UNKNOWN_KEY" not in config
    assert "UNKNOWN_KEY" in caplog.text


@pytest.mark.parametrize("key,value",[
    ("SUPPORT_THRESHOLD",0),
    ("CONFIDENCE_THRESHOLD",1.1),
    ("CONFIDENCE_THRESHOLD","x"),
    ("MAX_TUPEL_SIZE",-1),
    ("WHITELIST_BITS",4),
    ("NUM_MAP_TASKS",0),
    ("BASKET_ITEM_SPLITTER",""),
    ("ENGINE","hadoop"),
])
def test_validate_config_rejects(key,value):
    config=basketminer.defaultConfig(**{key:value})
    with pytest.raises(ConfigurationError):
        validateConfig(config)
