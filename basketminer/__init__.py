import json

__version__="1.0"

#mining thresholds
SupportThreshold=100
ConfidenceThreshold=0.3

#input/output formats
BasketItemSplitter=","
KeySeparator=";"
RuleComponentDelimiter="->"
RuleItemSeparator=","

#whitelist bit vector size (2^24 bits = 2MB packed)
WhitelistBits=1<<24

#helper and output directory names
HelperFilesDir="helperfiles"
FrequentItemSetsDir="frequentItemSets"
RulesDir="rules"
ItemsDir="items"

DEFAULTS={
    "SUPPORT_THRESHOLD":SupportThreshold,
    "CONFIDENCE_THRESHOLD":ConfidenceThreshold,
    "BASKET_ITEM_SPLITTER":BasketItemSplitter,
    "KEY_SEPARATOR":KeySeparator,
    "RULE_COMPONENT_DELIMITER":RuleComponentDelimiter,
    "RULE_ITEM_SEPARATOR":RuleItemSeparator,
    "MAX_TUPEL_SIZE":0,
    "WHITELIST_BITS":WhitelistBits,
    "KEEP_HELPER_FILES":True,
    "NUM_WORKERS":1,
    "NUM_MAP_TASKS":4,
    "NUM_REDUCERS":2,
    "ENGINE":"local",
    "SHOW_PROGRESS":False,
}

def loadConfig(filename):
    with open(filename,"r") as f:
        config=json.load(f)
    return config

def saveConfig(filename,config):
    with open(filename, "w") as f:
        json.dump(config,f,indent=2,sort_keys=True)

def defaultConfig(**overrides):
    config=dict(DEFAULTS)
    config.update(overrides)
    return config
