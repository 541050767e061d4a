import itertools
import logging
import collections
from operator import itemgetter
import pyspark
from pyspark.accumulators import AccumulatorParam
from basketminer.DataSet.Records import partFiles, writePartFile
from basketminer.MapReduce.LocalRunner import prepareOutput
from basketminer.MapReduce.Job import Job, JobResult, runMapper, runReducer

logger = logging.getLogger(__name__)


class CounterAccumulatorParam(AccumulatorParam):
    def zero(self,value):
        return collections.Counter()

    def addInPlace(self,value1,value2):
        value1.update(value2)
        return value1


class SparkJobRunner(object):
    """
    runs the same Job classes on spark: mapPartitionsWithIndex for map+combine,
    repartitionAndSortWithinPartitions as the shuffle, one reduce task per partition.
    reduce tasks write their part files themselves, so outputPath must be visible to every executor
    """
    def __init__(self,sparkContext=None,appName="basketminer",numMapTasks=4):
        if sparkContext is None:
            spark=pyspark.sql.SparkSession\
                .builder\
                .appName(appName)\
                .getOrCreate()
            sparkContext=spark.sparkContext
        self.sc=sparkContext
        self.numMapTasks=numMapTasks

    def run(self,job:Job,inputPaths,outputPath):
        logger.info("running {} on spark".format(job))
        if isinstance(inputPaths,str):
            inputPaths=[inputPaths]
        files=[f for path in inputPaths for f in partFiles(path)]
        prepareOutput(outputPath)

        counters=self.sc.accumulator(collections.Counter(),CounterAccumulatorParam())
        numReducers=job.numReducers
        partitioner=job.partitioner

        def mapTask(index,iterator):
            lines=[line for line in iterator if line]
            pairs,taskCounters=runMapper(job,lines,index,numMapTasks)
            counters.add(taskCounters)
            return iter(pairs)

        def reduceTask(index,iterator):
            groups=((key,[v for _,v in group]) for key,group in itertools.groupby(iterator,key=itemgetter(0)))
            pairs,taskCounters=runReducer(job,groups,index)
            writePartFile(outputPath,index,pairs)
            counters.add(taskCounters)
            return iter([index])

        if len(files)==0:
            rdd=self.sc.emptyRDD()
        else:
            rdd=self.sc.textFile(",".join(files),minPartitions=self.numMapTasks)

        numMapTasks=rdd.getNumPartitions()
        rdd.mapPartitionsWithIndex(mapTask)\
            .repartitionAndSortWithinPartitions(numReducers,lambda key:partitioner(key,numReducers))\
            .mapPartitionsWithIndex(reduceTask)\
            .collect()

        logger.info("{} completed with counters {}".format(job.name,dict(counters.value)))
        return JobResult(job,outputPath,collections.Counter(counters.value))
