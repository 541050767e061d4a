import os
import time
import shutil
import logging
import basketminer
from basketminer.Exceptions import PersistenceError
from basketminer.DataSet.HelperFiles import HelperFileStore
from basketminer.DataSet.Records import writePartFile
from basketminer.MapReduce.Job import Job
from basketminer.MapReduce.LocalRunner import LocalJobRunner
from basketminer.Mining import CandidateMining, AssociationMining

logger = logging.getLogger(__name__)


class MiningResult(object):
    def __init__(self):
        self.maxK=0
        self.frequentItemsets={}
        self.numRules=0
        self.counters={}
        self.runtime=0.0

    def __repr__(self):
        return "MiningResult(maxK={}, frequentItemsets={}, rules={}, runtime={:.1f}s)".format(
            self.maxK,self.frequentItemsets,self.numRules,self.runtime)


def createRunner(config):
    if config["ENGINE"]=="spark":
        from basketminer.MapReduce.SparkRunner import SparkJobRunner
        return SparkJobRunner(numMapTasks=config["NUM_MAP_TASKS"])
    return LocalJobRunner(numWorkers=config["NUM_WORKERS"],numMapTasks=config["NUM_MAP_TASKS"],
                          showProgress=config["SHOW_PROGRESS"])


class AssociationRules(object):
    """
    drives the whole extraction below one output directory:
        registry job -> candidate jobs for k=1,2,... until nothing is frequent -> rule jobs
    all state between jobs goes through <out>/helperfiles and the job outputs
    """
    def __init__(self,config,runner=None):
        self.config=dict(config)
        self.runner=runner if runner is not None else createRunner(self.config)
        self.counters={}

    def paths(self,outputPath):
        helperPath=os.path.join(outputPath,basketminer.HelperFilesDir)
        return {
            "helper":helperPath,
            "items":os.path.join(helperPath,basketminer.ItemsDir),
            "frequent":os.path.join(outputPath,basketminer.FrequentItemSetsDir),
            "rules":os.path.join(outputPath,basketminer.RulesDir),
            "rulesTmp":os.path.join(helperPath,"unrankedRules"),
        }

    def tupelPath(self,outputPath,k):
        return os.path.join(self.paths(outputPath)["frequent"],"{}-tupel".format(k))

    def jobConf(self,outputPath,**kwargs):
        conf=dict(self.config)
        conf["TMP_FILE_PATH"]=self.paths(outputPath)["helper"]
        conf.update(kwargs)
        return conf

    def run(self,inputPath,outputPath):
        t0=time.time()
        result=MiningResult()

        logger.info("running extraction with support threshold = {}, confidence threshold = {}".format(
            self.config["SUPPORT_THRESHOLD"],self.config["CONFIDENCE_THRESHOLD"]))

        self.saveRunConfig(outputPath)

        self.buildItemRegistry(inputPath,outputPath)

        result.maxK,result.frequentItemsets=self.mineFrequentItemsets(inputPath,outputPath)

        result.numRules=self.extractAssociationRules(outputPath,result.maxK)

        if not self.config["KEEP_HELPER_FILES"]:
            self.cleanup(outputPath,result.maxK)

        result.counters=dict(self.counters)
        result.runtime=time.time()-t0
        logger.info("application runtime: {}:{:02d}mins".format(int(result.runtime//60),int(result.runtime%60)))
        return result

    def saveRunConfig(self,outputPath):
        configFile=os.path.join(self.paths(outputPath)["helper"],"config.json")
        try:
            os.makedirs(self.paths(outputPath)["helper"],exist_ok=True)
            basketminer.saveConfig(configFile,self.config)
        except OSError as e:
            raise PersistenceError(configFile,"failed writing configuration: {}".format(e))

    def runJob(self,job,inputPaths,outputPath):
        jobResult=self.runner.run(job,inputPaths,outputPath)
        self.counters[job.name]=dict(jobResult.counters)
        return jobResult

    def buildItemRegistry(self,inputPath,outputPath):
        "one pass with a single reduce task, so every later task sees the same ids"
        job=Job("AssociationRules_BuildItemRegistry",self.jobConf(outputPath),
                CandidateMining.RegistryMapper,CandidateMining.RegistryReducer,
                combinerClass=CandidateMining.SumCombiner,numReducers=1)
        jobResult=self.runJob(job,inputPath,self.paths(outputPath)["items"])

        logger.info("number of processed baskets : {}".format(jobResult.getCounter(CandidateMining.Counters.INPUTLINES)))
        logger.info("number of malformed lines   : {}".format(jobResult.getCounter(CandidateMining.Counters.MALFORMED_LINES)))
        logger.info("number of distinct items    : {}".format(jobResult.getCounter(CandidateMining.Counters.ITEMS)))
        return jobResult

    def extractFrequentItems(self,inputPath,outputPath,tupelSize):
        "one candidate generation/count/filter round; returns the number of frequent itemsets"
        HelperFileStore(self.paths(outputPath)["helper"]).clearWhitelist(tupelSize)

        job=Job("AssociationRules_ExtractFrequentItems_{}-tupel".format(tupelSize),
                self.jobConf(outputPath,TUPEL_SIZE=tupelSize),
                CandidateMining.CandidateMapper,CandidateMining.CandidateReducer,
                combinerClass=CandidateMining.CandidateCombiner,numReducers=self.config["NUM_REDUCERS"])
        jobResult=self.runJob(job,inputPath,self.tupelPath(outputPath,tupelSize))

        frequent=jobResult.getCounter(CandidateMining.Counters.FREQUENT_ITEMSETS)
        logger.info("frequent itemset extraction completed for tupel size: {}".format(tupelSize))
        logger.info("number of passed itemsets   : {}".format(jobResult.getCounter(CandidateMining.Counters.WRITTENSETS)))
        logger.info("number of rejected itemsets : {}".format(jobResult.getCounter(CandidateMining.Counters.REJECTED_WL)))
        logger.info("number of frequent itemsets : {}".format(frequent))
        return frequent

    def mineFrequentItemsets(self,inputPath,outputPath):
        """
        k=1,2,... until an iteration finds nothing frequent or k reaches MAX_TUPEL_SIZE.
        bounded by the largest basket: no basket has a subset wider than itself
        """
        maxTupelSize=self.config["MAX_TUPEL_SIZE"]
        counts={}
        k=1
        while True:
            frequent=self.extractFrequentItems(inputPath,outputPath,k)
            if frequent==0:
                maxK=k-1
                break
            counts[k]=frequent
            if maxTupelSize and k>=maxTupelSize:
                maxK=k
                break
            k+=1

        logger.info("stopped after trying with {}-tupels, largest frequent itemsets have {} items".format(k,maxK))
        return maxK,counts

    def extractAssociationRules(self,outputPath,maxK):
        paths=self.paths(outputPath)
        if maxK<1:
            logger.info("no frequent items, writing empty rule set")
            writePartFile(paths["rules"],0,[])
            return 0

        frequentPaths=[self.tupelPath(outputPath,k) for k in range(1,maxK+1)]

        job=Job("AssociationRules_ExtractAssociationRules",
                self.jobConf(outputPath,FREQUENT_ITEMSETS_PATHS=frequentPaths),
                AssociationMining.AssociationMapper,AssociationMining.AssociationReducer,
                partitioner=AssociationMining.ItemsetPartitioner(self.config["KEY_SEPARATOR"]),
                numReducers=self.config["NUM_REDUCERS"])
        jobResult=self.runJob(job,frequentPaths,paths["rulesTmp"])
        logger.info("total number of itemset permutations: {}".format(jobResult.getCounter(AssociationMining.Counters.PERMUTATIONS)))
        logger.info("total number of extracted rules     : {}".format(jobResult.getCounter(AssociationMining.Counters.RULES)))
        unresolved=jobResult.getCounter(AssociationMining.Counters.UNRESOLVED_RULES)
        if unresolved:
            logger.warning("{} rules dropped without antecedent support".format(unresolved))

        job=Job("AssociationRules_RankAssociationRules",self.jobConf(outputPath),
                AssociationMining.RankingMapper,AssociationMining.RankingReducer,numReducers=1)
        jobResult=self.runJob(job,paths["rulesTmp"],paths["rules"])

        ranked=jobResult.getCounter(AssociationMining.Counters.RANKED_RULES)
        logger.info("number of rules above confidence threshold: {}".format(ranked))
        return ranked

    def cleanup(self,outputPath,maxK):
        "drop intermediary files, keeping the readable key mapping and the item counts"
        paths=self.paths(outputPath)
        HelperFileStore(paths["helper"]).cleanup()
        for path in (paths["rulesTmp"],self.tupelPath(outputPath,maxK+1)):
            try:
                if os.path.isdir(path):
                    shutil.rmtree(path)
            except OSError as e:
                raise PersistenceError(path,"failed deleting: {}".format(e))
        logger.info("removed helper files below {}".format(outputPath))
