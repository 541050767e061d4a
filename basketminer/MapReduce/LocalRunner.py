import os
import shutil
import logging
import collections
import multiprocessing
import tqdm
from basketminer.Exceptions import PersistenceError
from basketminer.DataSet.Records import readLines, writePartFile
from basketminer.MapReduce.Job import Job, JobResult, runMapper, runReducer, groupSorted

logger = logging.getLogger(__name__)


def _mapTask(args):
    return runMapper(*args)

def _reduceTask(args):
    return runReducer(*args)

def splitInput(lines,numSplits):
    "contiguous, near equal splits; never more splits than lines"
    numSplits=max(1,min(numSplits,len(lines)))
    size,rest=divmod(len(lines),numSplits)
    splits=[]
    start=0
    for i in range(numSplits):
        end=start+size+(1 if i<rest else 0)
        splits.append(lines[start:end])
        start=end
    return splits

def prepareOutput(outputPath):
    try:
        if os.path.exists(outputPath):
            logger.info("removing previous job output {}".format(outputPath))
            shutil.rmtree(outputPath)
        os.makedirs(outputPath)
    except OSError as e:
        raise PersistenceError(outputPath,e)


class LocalJobRunner(object):
    """
    runs a Job on this machine: map tasks over input splits (combiner applied per task),
    shuffle by partitioner, key sorted reduce tasks, one part file per reduce task
    """
    def __init__(self,numWorkers=1,numMapTasks=4,showProgress=False):
        self.numWorkers=numWorkers
        self.numMapTasks=numMapTasks
        self.showProgress=showProgress

    def _execute(self,func,tasks,desc):
        if self.numWorkers>1 and len(tasks)>1:
            with multiprocessing.Pool(min(self.numWorkers,len(tasks))) as pool:
                return list(tqdm.tqdm(pool.imap(func,tasks),total=len(tasks),desc=desc,disable=not self.showProgress))

        return [func(task) for task in tqdm.tqdm(tasks,desc=desc,disable=not self.showProgress)]

    def run(self,job:Job,inputPaths,outputPath):
        logger.info("running {}".format(job))
        lines=list(readLines(inputPaths))
        splits=splitInput(lines,self.numMapTasks)
        prepareOutput(outputPath)

        counters=collections.Counter()

        mapTasks=[(job,split,i,len(splits)) for i,split in enumerate(splits)]
        mapResults=self._execute(_mapTask,mapTasks,"{} map".format(job.name))

        partitions=[[] for _ in range(job.numReducers)]
        for pairs,taskCounters in mapResults:
            counters.update(taskCounters)
            for key,value in pairs:
                partitions[job.partitioner(key,job.numReducers)].append((key,value))

        reduceTasks=[(job,list(groupSorted(partition)),i) for i,partition in enumerate(partitions)]
        reduceResults=self._execute(_reduceTask,reduceTasks,"{} reduce".format(job.name))

        for i,(pairs,taskCounters) in enumerate(reduceResults):
            counters.update(taskCounters)
            writePartFile(outputPath,i,pairs)

        logger.info("{} completed with counters {}".format(job.name,dict(counters)))
        return JobResult(job,outputPath,counters)
