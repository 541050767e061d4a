import logging
import basketminer
from basketminer.Exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def buildConfig(configFile=None,**overrides):
    """
    job configuration = package defaults <- json config file <- overrides
    overrides with value None are ignored, so unset command line options keep the file/default value
    """
    config=basketminer.defaultConfig()

    if configFile:
        fileConfig=basketminer.loadConfig(configFile)
        unknown=set(fileConfig.keys())-set(config.keys())
        if unknown:
            logger.warning("ignoring unknown configuration keys {}".format(sorted(unknown)))
        for k in fileConfig:
            if k in config:
                config[k]=fileConfig[k]

    for k,v in overrides.items():
        if v is not None:
            config[k]=v

    validateConfig(config)
    return config


def validateConfig(config):
    try:
        support=int(config["SUPPORT_THRESHOLD"])
        confidence=float(config["CONFIDENCE_THRESHOLD"])
        maxK=int(config["MAX_TUPEL_SIZE"])
        bits=int(config["WHITELIST_BITS"])
        workers=int(config["NUM_WORKERS"])
        mapTasks=int(config["NUM_MAP_TASKS"])
        reducers=int(config["NUM_REDUCERS"])
    except KeyError as e:
        raise ConfigurationError("missing configuration key {}".format(e))
    except (TypeError,ValueError) as e:
        raise ConfigurationError("malformed configuration value: {}".format(e))

    if support<1:
        raise ConfigurationError("support threshold must be >= 1, got {}".format(support))
    if not 0.0<=confidence<=1.0:
        raise ConfigurationError("confidence threshold must be in [0,1], got {}".format(confidence))
    if maxK<0:
        raise ConfigurationError("max tupel size must be >= 0 (0 = unbounded), got {}".format(maxK))
    if bits<8:
        raise ConfigurationError("whitelist needs at least 8 bits, got {}".format(bits))
    if min(workers,mapTasks,reducers)<1:
        raise ConfigurationError("workers, map tasks and reducers must be >= 1")
    if not config["BASKET_ITEM_SPLITTER"]:
        raise ConfigurationError("basket item splitter must not be empty")
    if config["ENGINE"] not in ("local","spark"):
        raise ConfigurationError("unknown engine {}".format(config["ENGINE"]))

    config["SUPPORT_THRESHOLD"]=support
    config["CONFIDENCE_THRESHOLD"]=confidence
    config["MAX_TUPEL_SIZE"]=maxK
    config["WHITELIST_BITS"]=bits
    config["NUM_WORKERS"]=workers
    config["NUM_MAP_TASKS"]=mapTasks
    config["NUM_REDUCERS"]=reducers

    return config
